"""Application composition layer for the feature list views.

Modules in this package provide the timer primitives the view models run on
and wire one view model per mounted feature view, without placing list logic
in the presentation layer.
"""
