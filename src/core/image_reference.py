"""Container image reference construction.

Image tags are derived from the branch and the CI build number, so every
build of every branch gets its own tag (``gcr.io/proj/app:feature-x.7``).
The build number is owned by the CI system and assumed to increase
monotonically per branch; nothing here enforces that.
"""

from __future__ import annotations

from .models import ImageReference


class ImageReferenceBuilder:
    """Builds deterministic image references for branch builds."""

    def build(
        self,
        registry_host: str,
        project_id: str,
        app_name: str,
        branch_name: str,
        build_number: int,
    ) -> ImageReference:
        """Compose the image reference for one build.

        Args:
            registry_host: Registry hostname (e.g., "gcr.io")
            project_id: Registry project or namespace
            app_name: Application image name
            branch_name: Branch being built
            build_number: CI build number for the branch

        Returns:
            ImageReference rendering as host/project/app:branch.build

        Raises:
            ValueError: If build_number is negative or a component is empty
        """
        if build_number < 0:
            raise ValueError(f"Build number must be non-negative, got {build_number}")
        for label, value in (
            ("registry host", registry_host),
            ("project id", project_id),
            ("app name", app_name),
            ("branch name", branch_name),
        ):
            if not value:
                raise ValueError(f"Image reference {label} must not be empty")

        return ImageReference(
            registry_host=registry_host.rstrip("/"),
            project_id=project_id,
            app_name=app_name,
            branch_name=branch_name,
            build_number=build_number,
        )
