import os
import sys
import tempfile
from unittest.mock import patch

import pytest

# Add src to path for importing the source modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from common.load_settings import DEFAULT_CONFIG_PATH, load_retro_config  # noqa: E402


WEEK_TASK_REPORT = """===== TRIPS =====
✈️ Trip - Weekend in Tahoe

===== EVENTS =====
🎉 Party - Alex's birthday on Sat
😔 Sad - Missed the concert on Fri
🍽️ Dinner - Dinner with Sam on Wed

===== ROCKS =====
✅ Went well - Ship onboarding flow (launched Monday)
👾 Made progress - Learn Rust
🥊 Went bad - Fix the garage door (parts on backorder)
🚧 Didn't go so well - Meal prep

===== TASKS =====
PERSONAL TASKS (9 tasks):
✅ Personal Tasks (5)
• Renew passport
• Call the bank
✅ Home Tasks (3/4)
• Clean gutters
• Fix faucet
"""

WEEK_CAL_REPORT = """===== HABITS =====
✅ 💪 Good workout habits (3 workouts)
❌ 🛌 Bad sleeping habits (1 early wake ups, 5 days sleeping in)
⚠️ 🍻 Not great drinking habits (3 days sober, 4 days drinking)

===== CAL SUMMARY =====
☑️ Personal Time (11 events, 17.3 hours):
✅ Workout Events (3 events, 2.5 hours):
❌ Reading Time (0 events, 0 hours):

===== CAL EVENTS =====
✅ Workout Events (3 events, 2.5 hours):
• Morning run on Mon (7:00am - 8:00am)
• Gym on Wed (1h)
• Yoga on Fri (45m)
❌ Interpersonal events (0 events, 0 hours):
✅ Calls (2 events, 1.0 hours):
• Call with Mom on Sun (30m)
• Call with Dad (30m)
"""


@pytest.fixture
def mock_env():
    """Fixture to ensure environment is clean for each test."""
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def retro_config():
    """The bundled retro configuration."""
    return load_retro_config(DEFAULT_CONFIG_PATH)


@pytest.fixture
def week_task_report():
    return WEEK_TASK_REPORT


@pytest.fixture
def week_cal_report():
    return WEEK_CAL_REPORT


@pytest.fixture
def temp_retro_json():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "retros.json")
