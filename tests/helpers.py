import io

from PIL import Image


def make_image(width, height, fmt="JPEG", mode="RGB", color=(200, 40, 90)):
    if mode == "RGBA" and len(color) == 3:
        color = color + (128,)
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def data_url(tag):
    return f"data:image/jpeg;base64,{tag}"
