from pathlib import Path
from freezegun.api import FakeDatetime
import pytest
from yaml.dumper import SafeDumper
from yaml.representer import SafeRepresenter


def pytest_configure():
    SafeDumper.add_representer(FakeDatetime, SafeRepresenter.represent_datetime)


@pytest.fixture
def notes_cwd(fs):
    """Fake filesystem with an empty home directory and the cwd set to /notes/cwd."""
    fs.cwd = '/notes/cwd'
    Path(fs.cwd).mkdir(parents=True)
    Path('~').expanduser().mkdir(parents=True)
    return fs
