"""Data models extracted from an annotated source module.

The scanner and extractors turn the parsed module into these models;
the emitters in `apigen.generator` only ever read them.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

MARKER = "apigen:api"
TAG_KEY = "apivalidator"


class ApiAnnotation(BaseModel):
    """Payload of a `apigen:api {...}` docstring marker."""

    url: str
    auth: bool = False
    method: str = ""


class MethodDescriptor(BaseModel):
    """Routing metadata of one annotated handler method."""

    model_config = ConfigDict(frozen=True)

    receiver_type: str
    request_type: str
    method_name: str
    route: str
    verb: str = ""  # empty: inherit the previous sibling's verb
    requires_auth: bool = False


class FieldKind(str, Enum):
    """The two scalar kinds a request field may have."""

    TEXT = "str"
    INTEGER = "int"


class FieldRule(BaseModel):
    """Binding and validation rule for one request field."""

    model_config = ConfigDict(frozen=True)

    source_field_name: str
    external_name: str
    kind: FieldKind
    required: bool = False
    default_value: str = ""
    enum_values: tuple[str, ...] = ()
    min: int = 0
    max: int = 0


# receiver class name -> descriptors in declaration order
ReceiverRoutes = dict[str, list[MethodDescriptor]]
