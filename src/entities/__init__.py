from . import auth, aws, subscription
from .model import BaseModel, json_default

__all__ = ["BaseModel", "auth", "aws", "json_default", "subscription"]
