import json
import logging
import os
from typing import Dict, List, Optional

import cv2
import numpy as np
import onnxruntime as ort

from .models import ImageRef

logger = logging.getLogger(__name__)

INPUT_SIZE = 640


def load_image(image: ImageRef) -> np.ndarray:
    """Decode a file path or encoded image bytes into an RGB array."""
    if isinstance(image, (bytes, bytearray)):
        buf = np.frombuffer(image, dtype=np.uint8)
        img = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    else:
        img = cv2.imread(image)
    if img is None:
        raise ValueError("Cannot decode image")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


class YoloObjectLocalizer:
    """
    YOLOv8 ONNX object localizer returning named objects.

    Expects an exported model whose output rows are
    [x1, y1, x2, y2, score, cls] and a JSON label map {"<cls>": "<name>"}.
    If either file is missing the localizer stays constructed but reports
    `has_localization == False`.
    """

    name = "yolo_onnx"

    def __init__(
        self,
        model_path: str,
        labels_path: str,
        min_score: float = 0.25,
        session=None,
        labels: Optional[Dict[str, str]] = None,
    ):
        self.model_path = model_path
        self.min_score = min_score
        self.session = session
        self.labels = labels

        if self.session is None:
            if os.path.exists(model_path):
                logger.info("Initializing YOLO localizer from %s", model_path)
                # CPU-only for maximum portability
                self.session = ort.InferenceSession(
                    model_path, providers=["CPUExecutionProvider"]
                )
            else:
                logger.warning(
                    "YOLO localizer model not found at %s. "
                    "Photo recognition will be unavailable.",
                    model_path,
                )

        if self.labels is None:
            if os.path.exists(labels_path):
                with open(labels_path, "r", encoding="utf-8") as f:
                    self.labels = json.load(f)
            else:
                logger.warning("YOLO label map not found at %s", labels_path)

        if self.session is not None:
            self.input_name = self.session.get_inputs()[0].name
            self.output_name = self.session.get_outputs()[0].name

    @property
    def has_localization(self) -> bool:
        return self.session is not None and bool(self.labels)

    def localize(self, image: ImageRef) -> List[Dict]:
        """
        Run the detector on an image.

        Returns list of {"name": str, "score": float} ordered by score.
        """
        if not self.has_localization:
            raise RuntimeError("Object localization is not available")

        rgb = load_image(image)
        h, w = rgb.shape[:2]

        img = cv2.resize(rgb, (INPUT_SIZE, INPUT_SIZE))
        img = img.astype(np.float32) / 255.0
        img = img.transpose(2, 0, 1)[None]  # (1, 3, 640, 640)

        logger.debug(
            "Running YOLO ONNX inference: original_size=%sx%s, input_shape=%s",
            w,
            h,
            img.shape,
        )

        outputs = self.session.run([self.output_name], {self.input_name: img})[0]
        outputs = np.asarray(outputs)
        if outputs.ndim == 3 and outputs.shape[0] == 1:
            outputs = outputs[0]

        objects: List[Dict] = []
        for det in outputs:
            if det.shape[0] < 6:
                continue
            score, cls_id = float(det[4]), int(det[5])
            if score < self.min_score:
                continue
            label = self.labels.get(str(cls_id))
            if label is None:
                logger.debug("Unknown YOLO class id %s", cls_id)
                continue
            objects.append({"name": label, "score": score})

        objects.sort(key=lambda o: o["score"], reverse=True)
        logger.info("YOLO localized %d objects", len(objects))
        return objects
