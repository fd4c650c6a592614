from pydantic import BaseModel, ConfigDict


class ModelBase(BaseModel):
    """
    Base class for all integration-harness models.

    Enforces strict validation, forbids unknown fields,
    and enables assignment-time validation.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        frozen=False,
    )


SuiteName = str
MethodName = str
SettingKey = str
