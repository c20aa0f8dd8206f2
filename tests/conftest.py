"""
Crime Map - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Configuration fixtures
- Sample raw crime documents
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

# Set test environment
os.environ["CM_ENVIRONMENT"] = "dev"

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def configs_dir(project_root: Path) -> Path:
    """Get the configs directory."""
    return project_root / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Any:
    """Get test configuration."""
    from crimemap.shared.config import get_config, reload_config

    # Ensure fresh config for tests
    reload_config("dev")
    return get_config("dev")


# =============================================================================
# Sample Data Fixtures
# =============================================================================

CSV_HEADER = (
    "date,crime_type,police_station,latitude,longitude,age,cncp_details,crime_descriptions"
)


@pytest.fixture
def csv_header() -> str:
    return CSV_HEADER


@pytest.fixture
def example_raw_rows() -> pd.DataFrame:
    """The two-record example: one overridden station, one raw coordinate."""
    return pd.DataFrame(
        {
            "date": ["2020-05-01", "2021-07-01"],
            "crime_type": ["Petty", "Heinous"],
            "police_station": ["Sheshadripuram", "Kengeri"],
            "latitude": ["0", "12.9"],
            "longitude": ["0", "77.5"],
            "age": ["10", "30"],
            "cncp_details": ["", ""],
            "crime_descriptions": ["", ""],
        }
    )


@pytest.fixture
def sample_raw_data() -> pd.DataFrame:
    """Raw rows mixing valid, malformed and unknown-station records."""
    return pd.DataFrame(
        {
            "date": [
                "2019-03-14",
                "2020-01-19",
                "2020-06-30",
                "2021-09-23",
                "2022-04-05",
                "2022-11-17",
                "2023-07-08",
            ],
            "crime_type": ["Petty", "serious", "ccl", "HEINOUS", "petty", "robbery", "Serious"],
            "police_station": [
                "Madivala",
                "Koramangala",
                "Koramangala",
                "Whitefield",
                "Whitefield",
                "Indiranagar",
                "Yelahanka",
            ],
            "latitude": ["12.92", "12.9352", "12.9352", "12.97", "12.97", "bad", "0"],
            "longitude": ["77.61", "77.6245", "77.6245", "77.75", "77.75", "77.64", "77.59"],
            "age": ["24", "31", "16", "47", "abc", "38", "52"],
            "cncp_details": ["", "", "", "", "", "", ""],
            "crime_descriptions": ["a", "b", "c", "d", "e", "f", "g"],
        }
    )


@pytest.fixture
def sample_csv_text(csv_header: str) -> str:
    """CSV text with a blank line and a short row."""
    return "\n".join(
        [
            csv_header,
            "2020-05-01,Petty,Sheshadripuram,0,0,10,,phone theft",
            "",
            "2021-07-01,Heinous,Kengeri,12.9,77.5,30,,assault",
            "2022-02-02,serious,Koramangala,12.93,77.62,25",
        ]
    )


@pytest.fixture
def mock_remote_csv(mocker: Any, sample_csv_text: str) -> Any:
    """Mock a remote CSV document served over HTTP."""
    mock_response = mocker.MagicMock()
    mock_response.status_code = 200
    mock_response.content = sample_csv_text.encode("utf-8")
    mocker.patch("requests.get", return_value=mock_response)
    return mock_response


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def cleanup_env() -> Generator[None, None, None]:
    """Clean up environment variables after each test."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
