# Supabase table: combat_state
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- campaign_id: uuid (foreign key to campaigns.id, ON DELETE CASCADE, unique, not null)
- is_active: boolean (not null, default: false)
- round_number: integer (not null, default: 1)
- current_turn_index: integer (not null, default: 0)
- initiative_order: text[] (default: {}) - combatant ids in turn order
- enemies: jsonb (default: [])
- version: integer (not null, default: 0) - bumped on every write
- updated_at: timestamp (default: now())

One row per campaign, created on the first combat start. Writes are
compare-and-swap on version plus (is_active, round_number,
current_turn_index).
"""

COMBAT_STATE_TABLE = "combat_state"
