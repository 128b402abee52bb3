"""Profile form API routes."""

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_notifier, get_profile_form
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.profile import ProfileStateEnvelope, ProfileViewEnvelope
from core.rate_limit import limiter
from domain.entities.upload import StagedUpload
from domain.services.profile_form import ProfileForm
from infrastructure.notifications.flash import FlashNotifier

router = APIRouter(prefix="/profile", tags=["profile"])


async def _stage(upload: UploadFile) -> StagedUpload:
    """Read an upload into memory so the form can validate it."""
    content = await upload.read()
    return StagedUpload(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        content=content,
    )


def _envelope(form: ProfileForm, notifier: FlashNotifier) -> ProfileStateEnvelope:
    return ProfileStateEnvelope.model_validate(
        {"data": form.state(), "notifications": notifier.pull()}
    )


@router.get(
    "",
    response_model=ProfileViewEnvelope,
    summary="Render the profile form",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def show_profile(
    request: Request,
    user: CurrentUser,
    form: ProfileForm = Depends(get_profile_form),
) -> ProfileViewEnvelope:
    """Mount the form for the authenticated user and return its view description."""
    await form.mount(user.id)
    return ProfileViewEnvelope.model_validate({"data": form.render().to_dict()})


@router.patch(
    "/fields/{field}",
    response_model=ProfileStateEnvelope,
    summary="Update a single form field",
    responses={
        200: {"description": "Field accepted"},
        400: {"model": ErrorResponse, "description": "Unknown field"},
        422: {"model": ErrorResponse, "description": "Field failed validation"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def update_field(
    request: Request,
    field: str,
    user: CurrentUser,
    value: str | None = Form(None),
    upload: UploadFile | None = File(None),
    form: ProfileForm = Depends(get_profile_form),
    notifier: FlashNotifier = Depends(get_notifier),
) -> ProfileStateEnvelope:
    """Run the field's update hook: avatar uploads and email uniqueness are checked live."""
    await form.mount(user.id)
    await form.update(field, await _stage(upload) if upload else value)
    return _envelope(form, notifier)


@router.delete(
    "/avatar",
    response_model=ProfileStateEnvelope,
    summary="Remove the profile photo",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_avatar(
    request: Request,
    user: CurrentUser,
    form: ProfileForm = Depends(get_profile_form),
    notifier: FlashNotifier = Depends(get_notifier),
) -> ProfileStateEnvelope:
    """Delete the stored avatar. Does nothing when the user has none."""
    await form.mount(user.id)
    await form.delete_avatar()
    return _envelope(form, notifier)


@router.post(
    "",
    response_model=ProfileStateEnvelope,
    summary="Save the profile",
    responses={
        200: {"description": "Profile saved"},
        422: {"model": ErrorResponse, "description": "One or more fields failed validation"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def submit_profile(
    request: Request,
    user: CurrentUser,
    name: str | None = Form(None),
    email: str | None = Form(None),
    password: str | None = Form(None),
    password_confirmation: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    form: ProfileForm = Depends(get_profile_form),
    notifier: FlashNotifier = Depends(get_notifier),
) -> ProfileStateEnvelope:
    """Validate and save name, email, avatar and password in one go.

    Omitted name or email keep their current values. Passwords are only
    changed when ``password`` is sent.
    """
    await form.mount(user.id)
    if name is not None:
        form.set("user.name", name)
    if email is not None:
        form.set("user.email", email)
    if avatar is not None:
        form.set("avatar", await _stage(avatar))
    form.set("password", password)
    form.set("password_confirmation", password_confirmation)

    await form.submit()
    return _envelope(form, notifier)
