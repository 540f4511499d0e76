from pydantic import BaseModel


class PictureAttribution(BaseModel):
    photographer: str
    photographer_url: str | None = None

    model_config = {"frozen": True}


class Picture(BaseModel):
    id: str
    image_ref: str
    thumbnail_ref: str | None = None
    description: str | None = None
    avg_color: str | None = None
    attribution: PictureAttribution | None = None

    model_config = {"frozen": True}

    @property
    def preview_ref(self) -> str:
        return self.thumbnail_ref or self.image_ref
