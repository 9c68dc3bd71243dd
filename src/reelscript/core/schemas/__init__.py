from .scene import (
	AnchorImage,
	ReelMetadata,
	Scene,
	ScriptState,
	numbering_issues,
	scene_from_dict,
)

__all__ = [
	"AnchorImage",
	"ReelMetadata",
	"Scene",
	"ScriptState",
	"numbering_issues",
	"scene_from_dict",
]
