"""
Guardrail Policy Models

Immutable per-run policy. There is no module-level default: callers build
a PolicyConfig (usually from config.yaml) and pass it in.
"""

from pydantic import BaseModel, ConfigDict, Field


class PublishPolicy(BaseModel):
    """Publish gating rules"""
    model_config = ConfigDict(frozen=True)

    require_recent_change: bool = True
    max_mutation_gap: int = Field(default=2, ge=0)


class PolicyConfig(BaseModel):
    """Allow-lists and safety rules applied to every proposed action"""
    allowed_roots: tuple[str, ...]
    allowed_templates: tuple[str, ...]
    publish_policy: PublishPolicy = Field(default_factory=PublishPolicy)

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "allowed_roots": ["/content/okta", "/content/my-site"],
                "allowed_templates": [
                    "/conf/okta/settings/wcm/templates/landing-page",
                    "/conf/okta/settings/wcm/templates/press-release",
                ],
                "publish_policy": {"require_recent_change": True, "max_mutation_gap": 2},
            }
        },
    )
