# tests/utils/test_local_ids.py
from synapse_core.utils.local_ids import is_local_id, new_local_id


def test_local_ids_are_tagged_and_unique():
    ids = {new_local_id("vm") for _ in range(100)}

    assert len(ids) == 100
    assert all(i.startswith("local-vm-") for i in ids)
    assert all(is_local_id(i) for i in ids)


def test_remote_ids_are_not_local():
    assert not is_local_id("i-0abc123")
    assert not is_local_id("")
    assert not is_local_id(None)
