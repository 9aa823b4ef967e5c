# Supabase Auth
# This module uses Supabase's built-in authentication system.
# Supabase Auth handles registration, login, sessions and JWT validation
# (auth.users table). The two tables below are written by the
# post-registration hook in hooks.py.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null)
- display_name: text (not null)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: text (not null, default: 'user') - values: admin, moderator, user
- created_at: timestamp (default: now())
- unique constraint on (user_id, role)
"""

PROFILES_TABLE = "profiles"
USER_ROLES_TABLE = "user_roles"
