"""BranchMap - a collapsible, editable mind map viewer."""

__version__ = "1.0.0"
__app_id__ = "io.github.branchmap.BranchMap"
