"""
Popup API Endpoints

List, create, edit, preview and delete a shop's popups.
"""

import logging
from flask import Blueprint, Response, request, jsonify, g

from ..middleware.shopify_auth import require_shopify_auth
from ..services.popup_draft import normalize_popup
from ..services.popup_editor import PopupEditor
from ..services.popup_service import PopupService, parse_form_fields
from ..services.preview_renderer import DESKTOP, render_preview, render_preview_html
from ..services.step_navigator import StepNavigator
from ..services.style_resolver import (
    design_target_section,
    find_section,
    resolve_button_styles,
    resolve_design,
)
from ..utils.colors import picker_colors, picker_value
from ..utils.errors import ErrorCode, bad_request, error_response, not_found
from ..utils.exceptions import (
    OptinError,
    PersistenceError,
    PopupNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

popups_bp = Blueprint('popups', __name__)


def get_service() -> PopupService:
    """Get popup service for the current shop."""
    return PopupService(g.shop)


def handle_service_error(error: OptinError):
    """Map a service exception onto an API error response."""
    if isinstance(error, PopupNotFoundError):
        return not_found('Popup not found', ErrorCode.POPUP_NOT_FOUND)
    if isinstance(error, ValidationError):
        return bad_request(error.message, error.code)
    if isinstance(error, PersistenceError):
        return error_response(error.message, ErrorCode.DATABASE_ERROR, 500)
    return error_response(error.message, error.code, 400, log_error=False)


def _int_or_default(value, default=0):
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.lstrip('-').isdigit():
        return int(value)
    return default


def _working_draft(service: PopupService, popup_id, data: dict) -> dict:
    """The draft posted by the editor, or the stored one."""
    posted = data.get('draft')
    if posted is not None:
        if not isinstance(posted, dict):
            raise ValidationError('draft must be an object', 'draft')
        service.get_popup(popup_id)  # ownership check
        return normalize_popup(posted)
    return service.get_draft(popup_id)


# ---------------------------------------------------------------------------
# List / create
# ---------------------------------------------------------------------------

@popups_bp.route('', methods=['GET'])
@require_shopify_auth
def list_popups():
    """List the shop's popups, most recently saved first."""
    return jsonify({
        'success': True,
        'popups': get_service().list_popups(),
    })


@popups_bp.route('', methods=['POST'])
@require_shopify_auth
def create_popup():
    """
    Create a popup with seeded defaults.

    Request body (JSON or form):
        name: Popup name, required, at most 50 characters
    """
    if request.is_json:
        data = request.get_json(silent=True) or {}
    else:
        data = request.form

    try:
        popup = get_service().create_popup(data.get('name'))
    except OptinError as e:
        return handle_service_error(e)

    return jsonify({
        'success': True,
        'popup': popup,
        'message': 'Popup created',
    }), 201


# ---------------------------------------------------------------------------
# Single popup
# ---------------------------------------------------------------------------

@popups_bp.route('/<int:popup_id>', methods=['GET'])
@require_shopify_auth
def get_popup(popup_id):
    """Load a popup as a normalized editor draft."""
    try:
        draft = get_service().get_draft(popup_id)
    except OptinError as e:
        return handle_service_error(e)

    return jsonify({
        'success': True,
        'popup': draft,
        'design': resolve_design(draft),
    })


@popups_bp.route('/<int:popup_id>', methods=['PUT', 'POST'])
@require_shopify_auth
def save_popup(popup_id):
    """
    Save draft fields. Only the supplied fields change.

    Accepts JSON, or form fields with booleans as "true"/"false" and
    sections/customButtons as JSON strings.
    """
    try:
        if request.is_json:
            fields = request.get_json(silent=True)
            if not isinstance(fields, dict):
                return bad_request('No data provided')
        else:
            fields = parse_form_fields(request.form)
        if not fields:
            return bad_request('No data provided')

        popup = get_service().save_draft(popup_id, fields)
    except OptinError as e:
        return handle_service_error(e)

    return jsonify({
        'success': True,
        'popup': popup,
        'message': 'Popup saved successfully',
    })


@popups_bp.route('/<int:popup_id>', methods=['DELETE'])
@require_shopify_auth
def delete_popup(popup_id):
    """Delete a popup."""
    try:
        get_service().delete_popup(popup_id)
    except OptinError as e:
        return handle_service_error(e)

    return jsonify({'success': True, 'message': 'Popup deleted'})


@popups_bp.route('/<int:popup_id>/toggle', methods=['POST'])
@require_shopify_auth
def toggle_popup(popup_id):
    """Flip a popup between active and inactive."""
    try:
        popup = get_service().toggle_active(popup_id)
    except OptinError as e:
        return handle_service_error(e)

    return jsonify({
        'success': True,
        'popup': popup,
        'message': 'Popup updated',
    })


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------

@popups_bp.route('/<int:popup_id>/editor', methods=['POST'])
@require_shopify_auth
def apply_editor_operations(popup_id):
    """
    Apply editor operations to a draft without saving it.

    Request body:
        {
            "draft": {...},              # optional, defaults to the stored popup
            "operations": [
                {"op": "add_section", "args": {}},
                {"op": "move_section", "args": {"section_id": 1, "direction": "up"}}
            ],
            "selectedSectionId": 1,      # optional
            "selectedButtonKey": "primary"  # optional
        }

    Colour values may be sent as picker HSB dicts; they are stored as hex.

    Returns the new draft, the design the design tab should show and,
    when a button is selected, that button's resolved style. Colours are
    repeated in HSB under pickerColors / buttonPickerColors.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return bad_request('No data provided')

    operations = data.get('operations') or []
    if not isinstance(operations, list):
        return bad_request('operations must be a list', ErrorCode.INVALID_FIELD)

    selected_section_id = data.get('selectedSectionId')
    selected_button_key = data.get('selectedButtonKey')

    try:
        editor = PopupEditor(_working_draft(get_service(), popup_id, data))
        for operation in operations:
            if not isinstance(operation, dict) or not operation.get('op'):
                return bad_request('Each operation needs an op name', ErrorCode.INVALID_FIELD)
            args = operation.get('args') or {}
            if not isinstance(args, dict):
                return bad_request('Operation args must be an object', ErrorCode.INVALID_FIELD)
            args = dict(args)
            if 'value' in args:
                args['value'] = picker_value(args['value'])
            editor.apply_operation(operation['op'], args)

        draft = editor.draft
        design = resolve_design(draft, selected_section_id)
        result = {
            'success': True,
            'draft': draft,
            'design': design,
            'pickerColors': picker_colors(design),
        }
        if selected_button_key:
            section = design_target_section(draft, selected_section_id)
            button_style = resolve_button_styles(draft, section, selected_button_key)
            result['buttonStyle'] = button_style
            result['buttonPickerColors'] = picker_colors(button_style, ('backgroundColor', 'textColor'))
    except OptinError as e:
        return handle_service_error(e)
    except ValueError as e:
        return bad_request(str(e), ErrorCode.VALIDATION_ERROR)

    return jsonify(result)


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------

def _build_preview(draft: dict, options) -> dict:
    """
    Resolve the step and design, then render.

    ``options`` is a dict or request.args style mapping with step, navigate,
    target, selectedSectionId and selectedButtonKey.
    """
    sections = draft.get('sections') or []
    navigator = StepNavigator([s.get('id') for s in sections])
    navigator.sync(navigator.section_ids, bool(draft.get('isMultiStep')))

    if draft.get('isMultiStep'):
        navigator.go_to(_int_or_default(options.get('step'), 0))

    # The section being edited is the one on screen
    selected_section_id = options.get('selectedSectionId')
    selected = find_section(draft, selected_section_id) if selected_section_id is not None else None
    if selected is not None and draft.get('isMultiStep'):
        navigator.go_to(sections.index(selected))

    navigate = options.get('navigate')
    if navigate == 'next':
        navigator.next()
    elif navigate == 'previous':
        navigator.previous()

    layout = render_preview(
        draft,
        step=navigator.step,
        target=options.get('target') or DESKTOP,
        selected_button_key=options.get('selectedButtonKey'),
    )
    return {
        'layout': layout,
        'navigation': {
            'step': navigator.step,
            'totalSteps': navigator.total_steps,
            'isFirst': navigator.is_first,
            'isLast': navigator.is_last,
        },
    }


@popups_bp.route('/<int:popup_id>/preview', methods=['POST'])
@require_shopify_auth
def preview_popup(popup_id):
    """
    Layout description for the live preview.

    Request body:
        draft: Unsaved draft (optional, defaults to the stored popup)
        step: Step index for multi-step popups
        navigate: 'next' or 'previous', applied after step
        target: 'desktop' or 'mobile'
        selectedSectionId / selectedButtonKey: editor selection
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return bad_request('Request body must be an object')

    try:
        draft = _working_draft(get_service(), popup_id, data)
        preview = _build_preview(draft, data)
    except OptinError as e:
        return handle_service_error(e)
    except ValueError as e:
        return bad_request(str(e), ErrorCode.INVALID_FIELD)

    return jsonify({'success': True, **preview})


@popups_bp.route('/<int:popup_id>/preview.html', methods=['GET'])
@require_shopify_auth
def preview_popup_html(popup_id):
    """Stored popup rendered as a standalone HTML page."""
    try:
        draft = get_service().get_draft(popup_id)
        preview = _build_preview(draft, request.args)
    except OptinError as e:
        return handle_service_error(e)
    except ValueError as e:
        return bad_request(str(e), ErrorCode.INVALID_FIELD)

    return Response(render_preview_html(preview['layout']), mimetype='text/html')
