"""medreview review core package."""

from webapp.utils.annotations import create_annotation
from webapp.utils.context import (
    AnnotationRecommendation,
    ContextAnalysis,
    ViewRecommendation,
    analyze_context,
    annotation_context,
    focus_suggestions,
    group_annotations,
    metadata_insights,
    order_annotations,
    recommended_view,
)
from webapp.utils.errors import (
    ReviewError,
    UnknownError,
    ValidationError,
    handle_error,
    log_error,
)
from webapp.utils.interaction import (
    ContainerRect,
    InteractionEngine,
    InteractionState,
    image_to_screen,
    screen_to_image,
)
from webapp.utils.models import (
    Annotation,
    AnnotationCategory,
    AnnotationPriority,
    AnnotationType,
    Confidence,
    Coordinates,
    MedicalImage,
    Modality,
    Orientation,
)
from webapp.utils.review_session import ReviewEvents, ReviewSession
from webapp.utils.view import ViewController, ViewState
from webapp.utils.workflow import ReviewStep, WorkflowController, WorkflowState

__all__ = [
    # Models
    "Annotation",
    "AnnotationCategory",
    "AnnotationPriority",
    "AnnotationType",
    "Confidence",
    "Coordinates",
    "MedicalImage",
    "Modality",
    "Orientation",
    # Controllers
    "ReviewEvents",
    "ReviewSession",
    "ReviewStep",
    "ViewController",
    "ViewState",
    "WorkflowController",
    "WorkflowState",
    # Interaction
    "ContainerRect",
    "InteractionEngine",
    "InteractionState",
    "image_to_screen",
    "screen_to_image",
    # Annotations and context
    "AnnotationRecommendation",
    "ContextAnalysis",
    "ViewRecommendation",
    "analyze_context",
    "annotation_context",
    "create_annotation",
    "focus_suggestions",
    "group_annotations",
    "metadata_insights",
    "order_annotations",
    "recommended_view",
    # Errors
    "ReviewError",
    "UnknownError",
    "ValidationError",
    "handle_error",
    "log_error",
]
