import pytest

from doc_history.core.providers import FixedClock, SequentialIds
from doc_history.history import VersionHistory
from doc_history.version.version_control import VersionStore


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return VersionStore()


@pytest.fixture
def history(store, clock):
    return VersionHistory(store=store, clock=clock, id_factory=SequentialIds())


@pytest.fixture
def commit_all(history):
    """Commit each text in order to one document and return its id."""

    def _commit_all(*contents, document_id="doc"):
        for content in contents:
            snapshot = history.new_snapshot(content, author="alice", message="edit")
            history.commit_version(document_id, snapshot, history.head(document_id), "alice")
        return document_id

    return _commit_all
