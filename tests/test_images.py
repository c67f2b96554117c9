import json

import pytest
import responses

from launcher.constants import PINATA_API_URL, ZERO_ADDRESS
from launcher.images import ImageService, is_remote, mime_type

PIN_FILE = f"{PINATA_API_URL}/pinning/pinFileToIPFS"
PIN_JSON = f"{PINATA_API_URL}/pinning/pinJSONToIPFS"


@pytest.fixture
def images_dir(tmp_path):
    directory = tmp_path / "token-images"
    directory.mkdir()
    (directory / "b.png").write_bytes(b"png")
    (directory / "a.jpg").write_bytes(b"jpg")
    (directory / "notes.txt").write_text("not an image")
    return directory


def test_lists_only_images(images_dir):
    service = ImageService(images_directory=str(images_dir))
    assert service.all_images() == ["a.jpg", "b.png"]
    assert service.image_count() == 2


def test_random_image(images_dir):
    image = ImageService(images_directory=str(images_dir)).random_image()
    assert image.file_name in ("a.jpg", "b.png")
    assert image.content == image.file_name.split(".")[1].encode()


def test_missing_directory_is_created(tmp_path):
    directory = tmp_path / "missing"
    service = ImageService(images_directory=str(directory))
    assert directory.is_dir()
    assert service.random_image() is None


def test_save_image_refreshes(images_dir):
    service = ImageService(images_directory=str(images_dir))
    path = service.save_image(b"gif", "c.gif")
    assert service.image_count() == 3
    assert open(path, "rb").read() == b"gif"


def test_helpers():
    assert is_remote("https://pbs.twimg.com/a.jpg")
    assert not is_remote("/tmp/a.jpg")
    assert mime_type("a.png") == "image/png"
    assert mime_type("a.unknown") == "application/octet-stream"


def test_upload_without_jwt(images_dir):
    service = ImageService(images_directory=str(images_dir))
    assert service.upload_file(b"x", "x.png") is None
    assert service.upload_flap_metadata(str(images_dir / "a.jpg"), "Moon", "MOON", "d") is None


@responses.activate
def test_upload_flap_metadata(images_dir):
    responses.add(responses.GET, "https://pbs.twimg.com/a.jpg", body=b"remote")
    responses.add(responses.POST, PIN_FILE, json={"IpfsHash": "QmImage"})
    responses.add(responses.POST, PIN_JSON, json={"IpfsHash": "QmMeta"})
    service = ImageService("jwt", images_directory=str(images_dir))

    cid = service.upload_flap_metadata(
        "https://pbs.twimg.com/a.jpg",
        "Moon",
        "MOON",
        "Moon - moon",
        twitter="https://x.com/u/status/1",
    )

    assert cid == "QmMeta"
    upload = responses.calls[1].request
    assert upload.headers["Authorization"] == "Bearer jwt"
    assert b"MOON_image.jpg" in upload.body
    assert b"remote" in upload.body

    body = json.loads(responses.calls[2].request.body)
    assert body["pinataMetadata"] == {"name": "MOON_metadata.json"}
    assert body["pinataContent"] == {
        "name": "Moon",
        "symbol": "MOON",
        "description": "Moon - moon",
        "image": "QmImage",
        "twitter": "https://x.com/u/status/1",
        "telegram": None,
        "website": None,
        "creator": ZERO_ADDRESS,
    }


@responses.activate
def test_failed_image_upload_skips_metadata(images_dir):
    responses.add(responses.POST, PIN_FILE, json={"error": "unauthorized"}, status=401)
    service = ImageService("jwt", images_directory=str(images_dir))

    cid = service.upload_flap_metadata(str(images_dir / "a.jpg"), "Moon", "MOON", "d")

    assert cid is None
    assert len(responses.calls) == 1


def test_missing_local_image(images_dir):
    service = ImageService("jwt", images_directory=str(images_dir))
    assert service.upload_flap_metadata(str(images_dir / "nope.jpg"), "M", "M", "d") is None
