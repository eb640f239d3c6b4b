from pydantic import BaseModel
from typing import Any, Dict

# Schemas for the text-to-3D relay endpoints.
# Fields are typed as Any so the raw JSON value reaches the default rules
# below without pydantic coercing e.g. "false" into False.

DEFAULT_PROMPT = "3D object"
DEFAULT_ART_STYLE = "realistic"  # e.g. 'realistic' or 'sculpture'

class GenerationRequest(BaseModel):
    """Request schema for creating a Meshy preview (mesh only) task."""
    prompt: Any = None
    art_style: Any = None
    should_remesh: Any = None

    def to_preview_payload(self) -> Dict[str, Any]:
        """Builds the upstream body, applying the defaults for missing or falsy values."""
        return {
            "mode": "preview",
            "prompt": self.prompt or DEFAULT_PROMPT,
            "art_style": self.art_style or DEFAULT_ART_STYLE,
            "should_remesh": self.should_remesh is not False,  # only an explicit false disables remeshing
        }

class RefineRequest(BaseModel):
    """Request schema for promoting a completed preview task into a textured refine task."""
    preview_task_id: Any = None  # Required, checked by the router so the error message stays fixed
    enable_pbr: Any = None

    def to_refine_payload(self) -> Dict[str, Any]:
        return {
            "mode": "refine",
            "preview_task_id": self.preview_task_id,
            "enable_pbr": self.enable_pbr is True,
        }
