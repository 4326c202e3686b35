"""
Business logic services for the Optin popup builder.

PopupService talks to the database; import it from
``optin.services.popup_service`` directly.
"""
from .popup_editor import PopupEditor
from .step_navigator import StepNavigator
from .preview_renderer import render_preview, render_preview_html
from .upload_service import process_upload

__all__ = [
    'PopupEditor',
    'StepNavigator',
    'render_preview',
    'render_preview_html',
    'process_upload',
]
