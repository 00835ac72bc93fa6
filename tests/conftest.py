from datetime import datetime, UTC
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

VERIFIED_AT = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_script(fixtures_dir: Path) -> Path:
    return fixtures_dir / "1A.tas"


@pytest.fixture
def sample_telemetry(fixtures_dir: Path) -> Path:
    return fixtures_dir / "1A.telemetry.jsonl"


@pytest.fixture
def expected_verified(fixtures_dir: Path) -> str:
    return (fixtures_dir / "1A.verified.tas").read_text(encoding="utf-8")


@pytest.fixture
def fixed_clock():
    return lambda: VERIFIED_AT
