"""CLI command modules.

Commands:
- deploy: Run the full pipeline for a branch build
- resolve: Show where a branch deploys to
- render: Print the manifests a deploy would apply
- image-ref: Print the image reference for a branch build
"""

from .deploy import deploy, image_ref, render, resolve

__all__ = ["deploy", "resolve", "render", "image_ref"]
