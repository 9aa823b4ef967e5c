# Supabase table: characters
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- campaign_id: uuid (foreign key to campaigns.id, ON DELETE CASCADE, not null)
- user_id: uuid (foreign key to auth.users.id, not null) - creating player, immutable
- name: text (not null)
- class: text (not null)
- level: integer (not null, default: 1)
- hp: integer (not null, default: 10)
- max_hp: integer (not null, default: 10)
- ac: integer (not null, default: 10)
- stats: jsonb (default: six abilities at 10)
- abilities: jsonb (default: [])
- inventory: jsonb (default: [])
- xp: integer (not null, default: 0)
- xp_to_next: integer (not null, default: 300)
- position: jsonb (default: {"x": 0, "y": 0})
- status_effects: text[] (default: {})
- avatar_url: text (nullable)
- is_active: boolean (not null, default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""

CHARACTERS_TABLE = "characters"
