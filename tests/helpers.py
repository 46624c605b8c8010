import json
from pathlib import Path

from PIL import Image


def make_image(path: Path, size=(800, 600), color=(255, 255, 255), fmt="PNG") -> str:
    Image.new("RGB", size, color).save(path, format=fmt)
    return str(path)


def fenced(payload: dict) -> str:
    return "```json\n" + json.dumps(payload, indent=2) + "\n```"


def model_reply(differences: list, image2=(1568, 1176), image1=(1568, 1176)) -> str:
    dimensions = {
        "processed_dimensions": {
            "image1": {"width": image1[0], "height": image1[1]},
            "image2": {"width": image2[0], "height": image2[1]},
        }
    }
    return (
        "Here are the processed dimensions:\n\n"
        + fenced(dimensions)
        + "\n\nAnd the differences I found:\n\n"
        + fenced({"differences": differences})
        + "\n\nLet me know if you need more detail."
    )
