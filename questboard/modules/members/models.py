# Supabase table: campaign_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- campaign_id: uuid (foreign key to campaigns.id, ON DELETE CASCADE, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- is_dm: boolean (not null, default: false)
- joined_at: timestamp (default: now())
- unique constraint on (campaign_id, user_id)

There is no update path: rows are only inserted (join) and deleted (leave).
"""

MEMBERS_TABLE = "campaign_members"
