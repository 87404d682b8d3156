"""Shared fixtures: stores backed by a local temp dir or the fsspec memory fs."""

import uuid

import fsspec
import pytest

from gqlallow.store import AllowList

USER_DOC = """\
# Look up a user by id
variables {
  "id": 1  // any id works
}

query GetUser($id: ID!) {
  user(id: $id) {
    ...UserFields
  }
}

fragment UserFields on User {
  id
  name
}
"""


@pytest.fixture
def local_fs():
    return fsspec.filesystem("file")


@pytest.fixture
def store(local_fs, tmp_path):
    """Writable store rooted at tmp_path."""
    s = AllowList(local_fs, tmp_path.as_posix())
    yield s
    s.close()


@pytest.fixture
def memory_root():
    """A fresh root in the process-wide memory filesystem."""
    fs = fsspec.filesystem("memory")
    root = f"/gqlallow-{uuid.uuid4().hex[:8]}"
    yield fs, root
    if fs.exists(root):
        fs.rm(root, recursive=True)
