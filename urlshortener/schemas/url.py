from pydantic import BaseModel, Field, HttpUrl, field_validator

MAX_URL_LENGTH = 2048


# Request DTOs
class ShortenRequest(BaseModel):
    # original_url is the Python field, 'url' is the JSON key
    original_url: HttpUrl = Field(..., alias="url")

    model_config = {"populate_by_name": True}

    @field_validator('original_url', mode='before')
    @classmethod
    def ensure_scheme(cls, v):
        if not isinstance(v, str):
            return v
        v = v.strip().replace("\r", "").replace("\n", "")
        if "://" not in v:
            v = "https://" + v
        return v

    @field_validator('original_url')
    @classmethod
    def validate_url(cls, v):
        url_str = str(v)

        if len(url_str) > MAX_URL_LENGTH:
            raise ValueError(f'URL must be at most {MAX_URL_LENGTH} characters')

        if v.scheme not in ("http", "https"):
            raise ValueError('Only HTTP and HTTPS URLs are allowed')

        return v


# Response DTOs
class ShortenResponse(BaseModel):
    short_code: str
    short_url: str
    original_url: str


class ExpandResponse(BaseModel):
    original_url: str
