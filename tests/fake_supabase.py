"""
In-memory stand-in for the slice of the Supabase client the services use:
table().select/insert/update/delete, eq/in_ filters, order/limit/offset,
execute(). Unique constraints mirror the database schema.
"""
import copy
import threading
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

from postgrest.exceptions import APIError


UNIQUE_KEYS = {
    "campaign_members": [("campaign_id", "user_id")],
    "combat_state": [("campaign_id",)],
    "profiles": [("user_id",)],
    "user_roles": [("user_id", "role")],
}


class UniqueViolation(APIError):
    """Raised the way PostgREST reports a duplicate key."""

    def __init__(self, message):
        super().__init__({"message": message, "code": "23505", "hint": None, "details": None})


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.limit_count = None
        self.offset_count = 0

    def select(self, columns="*"):
        self.operation = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def offset(self, count):
        self.offset_count = count
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in self.columns.split(",")]
        return {c: copy.deepcopy(row.get(c)) for c in wanted}

    def execute(self):
        with self.db.lock:
            self.db.calls.append((self.table_name, self.operation))
            rows = self.db.tables.setdefault(self.table_name, [])
            if self.operation == "insert":
                data = self._insert(rows)
            elif self.operation == "update":
                data = []
                for row in rows:
                    if self._matches(row):
                        row.update(copy.deepcopy(self.payload))
                        data.append(copy.deepcopy(row))
            elif self.operation == "delete":
                data = [copy.deepcopy(r) for r in rows if self._matches(r)]
                self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            else:
                data = [r for r in rows if self._matches(r)]
                if self.order_by:
                    column, desc = self.order_by
                    data = sorted(data, key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
                data = data[self.offset_count:]
                if self.limit_count is not None:
                    data = data[:self.limit_count]
                data = [self._project(r) for r in data]
            return SimpleNamespace(data=data)

    def _insert(self, rows):
        payloads = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = []
        for payload in payloads:
            row = copy.deepcopy(payload)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            for key in UNIQUE_KEYS.get(self.table_name, []):
                if any(all(r.get(k) == row.get(k) for k in key) for r in rows):
                    raise UniqueViolation(f"duplicate key value violates unique constraint on {self.table_name}{key}")
            rows.append(row)
            inserted.append(copy.deepcopy(row))
        return inserted


class FakeSupabase:
    def __init__(self):
        self.lock = threading.RLock()
        self.tables = {}
        self.calls = []
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        with self.lock:
            return copy.deepcopy(self.tables.get(name, []))


class FakeAuth:
    """Supabase Auth double: the access token of a user is their user id."""

    def __init__(self):
        self.users = {}

    def _user(self, user_id, email, metadata=None):
        return SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata=metadata or {},
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    def sign_up(self, credentials):
        email = credentials["email"]
        if any(u.email == email for u in self.users.values()):
            raise Exception("User already registered")
        user = self._user(str(uuid.uuid4()), email, credentials.get("options", {}).get("data"))
        self.users[user.id] = user
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        for user in self.users.values():
            if user.email == credentials["email"]:
                return SimpleNamespace(user=user, session=SimpleNamespace(access_token=user.id))
        raise Exception("Invalid login credentials")

    def get_user(self, jwt=None):
        if not jwt or (not jwt.startswith("user-") and jwt not in self.users):
            raise Exception("invalid JWT: unable to parse or verify signature")
        user = self.users.get(jwt) or self._user(jwt, f"{jwt}@example.com")
        return SimpleNamespace(user=user)

    def sign_out(self):
        return None
