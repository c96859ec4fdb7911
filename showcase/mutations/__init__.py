"""Mutation coordinator."""

from showcase.mutations.coordinator import (
    ActionResult,
    MediaUpload,
    MutationCoordinator,
    TalentDraft,
)


__all__ = ["ActionResult", "MediaUpload", "MutationCoordinator", "TalentDraft"]
