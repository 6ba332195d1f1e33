import sys
from pathlib import Path

import pytest

# Ensure the project src directory is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from upline_hierarchy.config import ResolverConfig  # noqa: E402
from upline_hierarchy.registry.entities import ContactFlags, ContactRecord  # noqa: E402

ROOT_NUMBER = "18550335"
DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture
def config() -> ResolverConfig:
    return ResolverConfig(known_root_identifier=ROOT_NUMBER)


@pytest.fixture
def make_contact():
    def _make(contact_id: str, name: str | None = None, licensed: bool = False, **kwargs) -> ContactRecord:
        flags = kwargs.pop("flags", None) or ContactFlags(licensed=licensed)
        return ContactRecord(
            id=contact_id,
            display_name=name or f"Agent {contact_id}",
            flags=flags,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_contacts_path() -> Path:
    return DATA_DIR / "contacts_sample.json"
