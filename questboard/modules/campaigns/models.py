# Supabase table: campaigns
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- invite_code: text (not null) - short token used to join; unique among active campaigns (partial unique index)
- owner_id: uuid (foreign key to auth.users.id, not null)
- current_scene: text (default: 'The adventure begins...')
- game_state: jsonb (default: {})
- is_active: boolean (not null, default: true) - inactive campaigns cannot be joined
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Deleting a campaign removes its campaign_members, characters and combat_state
rows (ON DELETE CASCADE in the database; the service also deletes them
explicitly).
"""

CAMPAIGNS_TABLE = "campaigns"
