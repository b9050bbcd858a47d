"""Design matrix layout for the pooled covariate formula."""

from .layout import DesignLayout, DesignLayoutBuilder, build_design_layout, INTERCEPT_NAME

__all__ = [
    "DesignLayout",
    "DesignLayoutBuilder",
    "build_design_layout",
    "INTERCEPT_NAME",
]
