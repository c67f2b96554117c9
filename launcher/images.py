import mimetypes
import os
import random
from dataclasses import dataclass
from typing import List, Optional

import requests

from utils.log import log

from .constants import PINATA_API_URL, ZERO_ADDRESS

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


@dataclass(frozen=True)
class TokenImage:
    file_name: str
    path: str
    content: bytes


def is_remote(location: str) -> bool:
    return location.startswith("http://") or location.startswith("https://")


def mime_type(file_name: str) -> str:
    return mimetypes.guess_type(file_name)[0] or "application/octet-stream"


class ImageService:
    def __init__(
        self,
        pinata_jwt: str = "",
        images_directory: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.images_directory = images_directory or os.path.join(
            os.getcwd(), "assets", "token-images"
        )
        self.pinata_jwt = pinata_jwt
        self.timeout = timeout
        self.available_images: List[str] = []

        if not os.path.exists(self.images_directory):
            os.makedirs(self.images_directory, exist_ok=True)
            log(f"Created images directory: {self.images_directory}")
        self.refresh()

        if not pinata_jwt:
            log("Pinata JWT not set. IPFS uploads disabled.")

    def refresh(self) -> None:
        self.available_images = sorted(
            f
            for f in os.listdir(self.images_directory)
            if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS
        )

    def all_images(self) -> List[str]:
        return list(self.available_images)

    def image_count(self) -> int:
        return len(self.available_images)

    def random_image(self) -> Optional[TokenImage]:
        if not self.available_images:
            log("No images available. Add images to assets/token-images/")
            return None
        file_name = random.choice(self.available_images)
        path = os.path.join(self.images_directory, file_name)
        with open(path, "rb") as file:
            content = file.read()
        return TokenImage(file_name, path, content)

    def save_image(self, content: bytes, file_name: str) -> str:
        path = os.path.join(self.images_directory, file_name)
        with open(path, "wb") as file:
            file.write(content)
        self.refresh()
        return path

    def load_media(self, location: str) -> bytes:
        """Bytes of a local file or of a downloaded http(s) resource."""
        if not is_remote(location):
            with open(location, "rb") as file:
                return file.read()
        response = requests.get(location, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.pinata_jwt}"}

    def upload_file(
        self, content: bytes, file_name: str, content_type: Optional[str] = None
    ) -> Optional[str]:
        """Pins raw bytes, returns the CID"""
        if not self.pinata_jwt:
            log("Pinata not initialized. Skipping IPFS upload.")
            return None
        try:
            response = requests.post(
                f"{PINATA_API_URL}/pinning/pinFileToIPFS",
                headers=self._headers(),
                files={"file": (file_name, content, content_type or mime_type(file_name))},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            log(f"Error uploading {file_name} to IPFS: {exc}")
            return None
        return response.json()["IpfsHash"]

    def upload_json(self, content: dict, name: str) -> Optional[str]:
        if not self.pinata_jwt:
            log("Pinata not initialized. Skipping metadata upload.")
            return None
        try:
            response = requests.post(
                f"{PINATA_API_URL}/pinning/pinJSONToIPFS",
                headers=self._headers(),
                json={"pinataContent": content, "pinataMetadata": {"name": name}},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            log(f"Error uploading {name} to IPFS: {exc}")
            return None
        return response.json()["IpfsHash"]

    def upload_flap_metadata(
        self,
        image: str,
        name: str,
        symbol: str,
        description: str,
        twitter: Optional[str] = None,
        telegram: Optional[str] = None,
        website: Optional[str] = None,
    ) -> Optional[str]:
        """
        Pins the image and then the metadata JSON Flap reads. Returns the
        metadata CID, None if either upload fails.
        """
        if not self.pinata_jwt:
            log("Pinata not initialized. Skipping IPFS upload.")
            return None

        try:
            content = self.load_media(image)
        except (OSError, requests.RequestException) as exc:
            log(f"Error loading image {image}: {exc}")
            return None

        image_cid = self.upload_file(content, f"{symbol}_image.jpg", "image/jpeg")
        if not image_cid:
            return None

        metadata = {
            "name": name,
            "symbol": symbol,
            "description": description,
            "image": image_cid,
            "twitter": twitter or None,
            "telegram": telegram or None,
            "website": website or None,
            "creator": ZERO_ADDRESS,
        }
        return self.upload_json(metadata, f"{symbol}_metadata.json")
