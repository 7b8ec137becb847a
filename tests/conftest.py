import pytest
from dotenv import load_dotenv

from fakes import FakeClock

# Load environment variables from .env file for tests
load_dotenv()


@pytest.fixture
def clock():
    return FakeClock()
