import base64
import io

from PIL import Image


class Utils:
    """Small helpers shared by the UI callbacks."""

    @staticmethod
    def img_to_data_uri(pil_img: Image.Image) -> str:
        """Return an inline <img> tag so Gradio does not write temp files."""
        buf = io.BytesIO()
        pil_img.save(buf, format="PNG")
        b64 = base64.b64encode(buf.getvalue()).decode("utf-8")
        return (
            f"<img src='data:image/png;base64,{b64}' "
            "style='image-rendering:pixelated;width:100%;max-width:640px;' />"
        )
