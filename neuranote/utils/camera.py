"""
Camera capture using OpenCV, with frames handed over as JPEG data URLs.
"""
import asyncio
import base64
import io
import logging
from typing import Optional

import cv2
import numpy as np
from PIL import Image


def image_to_bytes(image: Image.Image, format: str = 'JPEG', quality: int = 92) -> bytes:
    """
    Convert PIL Image to bytes.

    Args:
        image: PIL Image object
        format: Image format ('PNG', 'JPEG', etc.)
        quality: JPEG quality (1-100), ignored for PNG

    Returns:
        bytes: Image data as bytes
    """
    buffer = io.BytesIO()
    if format.upper() == 'JPEG':
        # JPEG has no alpha channel
        if image.mode in ('RGBA', 'LA', 'P'):
            image = image.convert('RGB')
        image.save(buffer, format=format, quality=quality)
    else:
        image.save(buffer, format=format)
    return buffer.getvalue()


def image_to_data_url(image: Image.Image, quality: int = 92) -> str:
    """Encode a PIL Image as ``data:image/jpeg;base64,...``"""
    encoded = base64.b64encode(image_to_bytes(image, 'JPEG', quality)).decode('ascii')
    return f"data:image/jpeg;base64,{encoded}"


def frame_to_image(frame: np.ndarray) -> Image.Image:
    """OpenCV delivers BGR; Pillow expects RGB"""
    return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))


class CameraManager:
    """
    Manages a local camera. The device is opened on demand and kept open
    while the webcam mode is active so that consecutive snaps are fast.
    """

    def __init__(self, camera_index: int = 0, jpeg_quality: int = 92):
        self.logger = logging.getLogger(__name__)
        self.camera_index = camera_index
        self.jpeg_quality = jpeg_quality
        self.capture: Optional[cv2.VideoCapture] = None

    @property
    def is_open(self) -> bool:
        return self.capture is not None and self.capture.isOpened()

    def open(self) -> bool:
        if self.is_open:
            return True
        self.capture = cv2.VideoCapture(self.camera_index)
        if not self.capture.isOpened():
            self.logger.error(f"Camera {self.camera_index} could not be opened")
            self.capture = None
            return False
        self.logger.info(f"Camera {self.camera_index} opened")
        return True

    def release(self):
        if self.capture is not None:
            self.capture.release()
            self.capture = None
            self.logger.info("Camera released")

    def grab_image(self) -> Optional[Image.Image]:
        """
        Read one frame from the camera.

        Returns:
            A Pillow Image of the frame, or None if capture fails.
        """
        if not self.open():
            return None
        ok, frame = self.capture.read()
        if not ok or frame is None:
            self.logger.error("Camera returned no frame")
            return None
        return frame_to_image(frame)

    def snap(self) -> Optional[str]:
        """Capture one frame as a JPEG data URL"""
        image = self.grab_image()
        if image is None:
            return None
        return image_to_data_url(image, self.jpeg_quality)

    async def snap_async(self) -> Optional[str]:
        """Run ``snap`` off the event loop; camera reads block"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.snap)
