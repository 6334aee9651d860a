"""JSON API views for files app.

Identity comes from Django's authentication middleware; every view
scopes its work to ``request.user``. Errors from the business logic are
rendered as ``{"error": message}`` with the status their class carries.
"""

import functools
import logging
from collections.abc import Callable
from typing import Final

from django.http import FileResponse, HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from vault.apps.files.exceptions import (
    FilesError,
    InternalError,
    ValidationError,
)
from vault.apps.files.logic.file_operations import (
    get_file_info,
    open_file,
    upload_file,
)
from vault.apps.files.logic.query_operations import list_files
from vault.apps.files.logic.trash_operations import (
    empty_trash,
    move_to_trash,
    permanent_delete_file,
    restore_file,
)

_TRUE_VALUES: Final = frozenset(('true', '1', 'yes'))

_View = Callable[..., HttpResponse]

logger = logging.getLogger(__name__)


def _error_response(error: FilesError) -> JsonResponse:
    # Server-side details stay in the logs
    if error.status_code >= 500:
        message = error.default_message
    else:
        message = error.message
    return JsonResponse({'error': message}, status=error.status_code)


def api_view(*methods: str) -> Callable[[_View], _View]:
    """Wrap a view with method, authentication and error handling.

    Args:
        methods: Allowed HTTP methods.

    Returns:
        View decorator.
    """
    def decorator(view: _View) -> _View:
        @require_http_methods(list(methods))
        @functools.wraps(view)
        def wrapper(
            request: HttpRequest,
            *args: object,
            **kwargs: object,
        ) -> HttpResponse:
            if not request.user.is_authenticated:
                return JsonResponse(
                    {'error': 'Authentication required'},
                    status=401,
                )
            try:
                return view(request, *args, **kwargs)
            except FilesError as error:
                if error.status_code >= 500:
                    logger.error(
                        '%s failed: %s',
                        view.__name__,
                        error,
                        exc_info=error,
                    )
                return _error_response(error)
            except Exception:
                logger.exception('Unexpected error in %s', view.__name__)
                return _error_response(InternalError())
        return wrapper
    return decorator


def _parse_positive_int(
    raw: str | None,
    name: str,
    default: int | None,
) -> int | None:
    if raw is None or raw == '':
        return default
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise ValidationError(f'{name} must be a positive integer') from exc
    if parsed < 1:
        raise ValidationError(f'{name} must be a positive integer')
    return parsed


@api_view('POST')
def upload(request: HttpRequest) -> HttpResponse:
    """Upload the multipart ``file`` field."""
    record = upload_file(request.user.pk, request.FILES.get('file'))
    return JsonResponse(
        {
            'message': 'File uploaded successfully',
            'file': record.summary(),
        },
        status=201,
    )


@api_view('GET')
def file_list(request: HttpRequest) -> HttpResponse:
    """List active or trashed files with search and pagination."""
    page = list_files(
        request.user.pk,
        page=_parse_positive_int(request.GET.get('page'), 'page', 1),
        limit=_parse_positive_int(request.GET.get('limit'), 'limit', None),
        search=request.GET.get('search', ''),
        trashed=request.GET.get('trash', 'false').lower() in _TRUE_VALUES,
    )
    return JsonResponse({
        'files': [record.as_listing() for record in page.records],
        'pagination': page.pagination(),
    })


@api_view('GET')
def download(request: HttpRequest, storage_key: str) -> HttpResponse:
    """Stream the blob as an attachment named after the original file."""
    file_download = open_file(request.user.pk, storage_key)
    return FileResponse(
        file_download.stream,
        as_attachment=True,
        filename=file_download.record.original_name,
        content_type=file_download.record.mime_type,
    )


@api_view('GET')
def info(request: HttpRequest, storage_key: str) -> HttpResponse:
    """Get file metadata."""
    record = get_file_info(request.user.pk, storage_key)
    return JsonResponse({'file': record.summary()})


@api_view('DELETE')
def trash(request: HttpRequest, storage_key: str) -> HttpResponse:
    """Move file to trash."""
    move_to_trash(request.user.pk, storage_key)
    return JsonResponse({'message': 'File moved to trash successfully'})


@api_view('POST')
def restore(request: HttpRequest, storage_key: str) -> HttpResponse:
    """Restore file from trash."""
    restore_file(request.user.pk, storage_key)
    return JsonResponse({'message': 'File restored successfully'})


@api_view('DELETE')
def permanent_delete(request: HttpRequest, storage_key: str) -> HttpResponse:
    """Permanently delete file."""
    permanent_delete_file(request.user.pk, storage_key)
    return JsonResponse({'message': 'File permanently deleted successfully'})


@api_view('DELETE')
def clear_trash(request: HttpRequest) -> HttpResponse:
    """Permanently delete everything in trash."""
    count = empty_trash(request.user.pk)
    return JsonResponse({
        'message': 'Trash emptied successfully',
        'deleted': count,
    })
