import pytest

from marketplace.services.blob_store import BlobStore, slip_key


@pytest.fixture
def store(tmp_path):
    return BlobStore(root=str(tmp_path), base_url="http://files.local/blobs/")


def test_put_exists_delete(store):
    url = store.put("a/b/slip.jpg", b"data")

    assert url == "http://files.local/blobs/a/b/slip.jpg"
    assert store.exists("a/b/slip.jpg")
    assert store.delete("a/b/slip.jpg") is True
    assert store.exists("a/b/slip.jpg") is False
    assert store.delete("a/b/slip.jpg") is False


def test_key_outside_root_rejected(store):
    with pytest.raises(ValueError):
        store.put("../escape.jpg", b"data")


def test_slip_keys_are_unique_per_upload():
    first, second = slip_key("buyer1"), slip_key("buyer1")

    assert first.startswith("paymentSlipImage/slips/buyer1_")
    assert first != second
