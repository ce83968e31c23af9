"""
Pytest configuration and fixtures for matching tests
"""

import pytest

from propmatch.config import Settings
from propmatch.exceptions import DataAccessError
from propmatch.matching import MatchingEngine


class FakeProfileRepository:
    """In-memory profiles table"""

    def __init__(self, profiles=None):
        self.profiles = {p["id"]: p for p in (profiles or [])}
        self.fail_get = set()
        self.fail_list = False

    async def get_by_id(self, user_id):
        if user_id in self.fail_get:
            raise DataAccessError("boom", operation="profiles.get_by_id")
        return self.profiles.get(user_id)

    async def get_all_ids(self):
        if self.fail_list:
            raise DataAccessError("boom", operation="profiles.get_all_ids")
        return list(self.profiles)


class FakePropertyRepository:
    """In-memory properties table"""

    def __init__(self, properties=None):
        self.properties = list(properties or [])
        self.fail = False
        self.requested_statuses = []

    async def get_by_status(self, status):
        self.requested_statuses.append(status)
        if self.fail:
            raise DataAccessError("timeout", operation="properties.get_by_status")
        return [p for p in self.properties if p.get("status") == status]

    async def get_by_ids(self, property_ids):
        if self.fail:
            raise DataAccessError("timeout", operation="properties.get_by_ids")
        return [p for p in self.properties if p["id"] in property_ids]


class FakeMatchRepository:
    """In-memory matches table that records every call"""

    def __init__(self):
        self.rows = []
        self.calls = []
        self.fail_delete_for = set()
        self.fail_insert_for = set()
        self.fail_rpc = False

    async def get_by_user(self, user_id):
        self.calls.append(("get_by_user", user_id))
        rows = [dict(r) for r in self.rows if r["user_id"] == user_id]
        return sorted(rows, key=lambda r: r["match_score"], reverse=True)

    async def delete_by_user(self, user_id):
        self.calls.append(("delete_by_user", user_id))
        if user_id in self.fail_delete_for:
            raise DataAccessError("delete failed", operation="matches.delete_by_user")
        self.rows = [r for r in self.rows if r["user_id"] != user_id]

    async def insert_many(self, rows):
        self.calls.append(("insert_many", len(rows)))
        if any(r["user_id"] in self.fail_insert_for for r in rows):
            raise DataAccessError("insert failed", operation="matches.insert_many")
        self.rows.extend(dict(r) for r in rows)

    async def replace_for_user(self, function_name, user_id, rows):
        self.calls.append(("replace_for_user", function_name, user_id))
        if self.fail_rpc:
            raise DataAccessError("rpc failed", operation=f"rpc:{function_name}")
        self.rows = [r for r in self.rows if r["user_id"] != user_id]
        self.rows.extend(dict(r) for r in rows)

    def rows_for(self, user_id):
        return [r for r in self.rows if r["user_id"] == user_id]


@pytest.fixture
def settings():
    """Settings that never touch the environment"""
    return Settings(
        supabase_url="http://localhost:54321",
        supabase_key="test-key",
        _env_file=None,
    )


@pytest.fixture
def sample_properties():
    """Available and unavailable properties in fetch order"""
    return [
        {
            "id": "p-marina",
            "title": "Marina view apartment",
            "price": 1500,
            "location": "Dubai Marina",
            "type": "apartment",
            "bedrooms": 2,
            "bathrooms": 2,
            "status": "available",
        },
        {
            "id": "p-villa",
            "title": "Family villa",
            "price": 2600,
            "location": "Arabian Ranches, Dubai",
            "type": "villa",
            "bedrooms": 4,
            "bathrooms": 3,
            "status": "available",
        },
        {
            "id": "p-office",
            "title": "Office in Abu Dhabi",
            "price": 9000,
            "location": "Abu Dhabi",
            "type": "office",
            "bedrooms": None,
            "bathrooms": 1,
            "status": "available",
        },
        {
            "id": "p-sold",
            "title": "Sold apartment",
            "price": 1500,
            "location": "Dubai Marina",
            "type": "apartment",
            "bedrooms": 2,
            "bathrooms": 2,
            "status": "sold",
        },
        {
            "id": "p-downtown",
            "title": "Downtown apartment",
            "price": 1800,
            "location": "Downtown Dubai",
            "type": "apartment",
            "bedrooms": 2,
            "bathrooms": 2,
            "status": "available",
        },
    ]


@pytest.fixture
def sample_profiles():
    """Profiles in both storage shapes"""
    return [
        {
            "id": "u-flat",
            "location": "Dubai",
            "property_budget_min": 1000,
            "property_budget_max": 2000,
            "property_types": ["buy"],
            "property_bedrooms": 2,
            "property_bathrooms": 2,
        },
        {
            "id": "u-nested",
            "location": "Abu Dhabi",
            "propertyPreferences": {
                "budget": {"min": 5000, "max": 10000},
                "types": ["invest"],
                "bathrooms": 1,
            },
        },
        {
            "id": "u-empty",
        },
    ]


@pytest.fixture
def profile_repo(sample_profiles):
    return FakeProfileRepository(sample_profiles)


@pytest.fixture
def property_repo(sample_properties):
    return FakePropertyRepository(sample_properties)


@pytest.fixture
def match_repo():
    return FakeMatchRepository()


@pytest.fixture
def engine(profile_repo, property_repo, match_repo, settings):
    """Matching engine wired to in-memory repositories"""
    return MatchingEngine(
        profile_repo=profile_repo,
        property_repo=property_repo,
        match_repo=match_repo,
        settings=settings,
    )
