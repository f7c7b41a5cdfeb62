"""
Request schema for the generate endpoint.

Mirrors the JSON payload the storefront sends (camelCase keys) and converts
it into the core's value types.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from werkzeug.utils import secure_filename

from .errors import ValidationError
from .models import GenerationOptions, ImageTransform, PrintDimensions, PrintJob, PrintSide


class PrintDimensionsPayload(BaseModel):
    width: StrictFloat
    height: StrictFloat

    @field_validator('width', 'height')
    @classmethod
    def nonzero(cls, value: float) -> float:
        if value == 0:
            raise ValueError("must be nonzero")
        return value


class TransformPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rotation: StrictFloat
    zoom: StrictFloat
    pan_x: StrictFloat = Field(default=0.0, alias='panX')
    pan_y: StrictFloat = Field(default=0.0, alias='panY')

    def to_transform(self) -> ImageTransform:
        return ImageTransform(
            rotation=self.rotation,
            zoom=self.zoom,
            pan_x=self.pan_x,
            pan_y=self.pan_y,
        )


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_base64: str = Field(alias='imageBase64', min_length=1)
    back_image_base64: Optional[str] = Field(default=None, alias='backImageBase64')
    print_dimensions: PrintDimensionsPayload = Field(alias='printDimensions')
    transform: TransformPayload
    back_transform: Optional[TransformPayload] = Field(default=None, alias='backTransform')
    include_bleed: StrictBool = Field(default=False, alias='includeBleed')
    include_crop_marks: StrictBool = Field(default=False, alias='includeCropMarks')
    filename: Optional[str] = None

    @field_validator('back_image_base64')
    @classmethod
    def blank_back_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode='after')
    def back_transform_required(self) -> 'GenerateRequest':
        if self.back_image_base64 is not None and self.back_transform is None:
            raise ValueError("backTransform is required when backImageBase64 is provided")
        return self

    def download_name(self, default: str = "print-ready.pdf") -> str:
        """Sanitized attachment filename, always ending in .pdf."""
        name = secure_filename(self.filename or "") or default
        if not name.lower().endswith('.pdf'):
            name = f"{name}.pdf"
        return name

    def to_print_job(self) -> PrintJob:
        """Build the core job; value types raise ValidationError on bad geometry."""
        dimensions = PrintDimensions(
            width=self.print_dimensions.width,
            height=self.print_dimensions.height,
        )
        front = PrintSide(self.image_base64, self.transform.to_transform(), label="front")

        back = None
        if self.back_image_base64 is not None:
            back = PrintSide(self.back_image_base64, self.back_transform.to_transform(), label="back")

        return PrintJob(
            front=front,
            back=back,
            dimensions=dimensions,
            options=GenerationOptions(
                include_bleed=self.include_bleed,
                include_crop_marks=self.include_crop_marks,
            ),
            filename=self.filename,
        )


def parse_generate_request(payload: Any) -> GenerateRequest:
    """Validate a decoded JSON body, raising the app's ValidationError on failure."""
    if not isinstance(payload, dict):
        raise ValidationError(
            "Request body must be a JSON object",
            suggestions=["Send Content-Type: application/json with a JSON object body"]
        )

    try:
        return GenerateRequest.model_validate(payload)
    except PydanticValidationError as e:
        # Omit inputs, they can be megabytes of base64
        problems = [
            {'field': '.'.join(str(part) for part in error['loc']) or 'body', 'message': error['msg']}
            for error in e.errors()
        ]
        summary = '; '.join(f"{p['field']}: {p['message']}" for p in problems)
        raise ValidationError(
            f"Invalid generate request: {summary}",
            details={'errors': problems},
            suggestions=["imageBase64, printDimensions and transform are required"]
        )


def describe_request(request: GenerateRequest) -> Dict[str, Any]:
    """Loggable summary of a request without the image payloads."""
    return {
        'print_dimensions': request.print_dimensions.model_dump(),
        'transform': request.transform.model_dump(),
        'back_transform': request.back_transform.model_dump() if request.back_transform else None,
        'double_sided': request.back_image_base64 is not None,
        'include_bleed': request.include_bleed,
        'include_crop_marks': request.include_crop_marks,
        'front_payload_chars': len(request.image_base64),
    }
