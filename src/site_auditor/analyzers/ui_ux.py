"""UI/UX analyzer."""

from ..models import PageRecord, Recommendation, TestOutcome, TestType
from .base import BaseAnalyzer, Check, Finding, finding, form_label
from .performance import has_viewport_meta

HEAVY_SCRIPT_COUNT = 10

NAVIGATION_MARKERS = ("<nav", "navigation", "menu")
LOADING_MARKERS = ("loading", "spinner", "progress")
VALIDATION_MARKERS = ("error", "invalid", "required")
FOCUS_MARKERS = ("tabindex", "focus", "outline")
SUBMIT_MARKERS = ('type="submit"', "type='submit'", "<button")
LABEL_MARKERS = ("<label", "aria-label=")

LIMITED_SCORE = 70
LIMITED_RECOMMENDATIONS = (
    Recommendation(
        priority="medium",
        message="Review the user experience once the website becomes accessible",
        impact="Layout and interaction checks require full page access",
    ),
    Recommendation(
        priority="high",
        message="Ensure the site renders well on mobile devices with a responsive layout",
        impact="Most visitors browse on mobile devices",
    ),
    Recommendation(
        priority="medium",
        message="Provide clear navigation and visible keyboard focus styles",
        impact="Helps all users find content and move through the site",
    ),
)


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def _form_finding(index: int, action: str, message: str) -> Finding:
    return {"message": f"{form_label(index)} {message}", "form": action or "Unknown action"}


def _viewport(page: PageRecord) -> list[Finding]:
    if has_viewport_meta(page):
        return []
    return finding("Missing viewport meta tag for mobile responsiveness", location=page.url)


def _responsive(page: PageRecord) -> list[Finding]:
    if "@media" in page.html_content or any("responsive" in css for css in page.stylesheets):
        return []
    return finding("No responsive design patterns detected", location=page.url)


def _submit_controls(page: PageRecord) -> list[Finding]:
    return [
        _form_finding(index, form.action, "appears to be missing a submit button")
        for index, form in enumerate(page.forms)
        if not _contains_any(form.html, SUBMIT_MARKERS)
    ]


def _placeholder_labels(page: PageRecord) -> list[Finding]:
    return [
        _form_finding(index, form.action, "relies only on placeholder text for field labels")
        for index, form in enumerate(page.forms)
        if "placeholder=" in form.html and not _contains_any(form.html, LABEL_MARKERS)
    ]


def _navigation(page: PageRecord) -> list[Finding]:
    if _contains_any(page.html_content, NAVIGATION_MARKERS):
        return []
    return finding("No clear navigation structure detected", location=page.url)


def _loading_states(page: PageRecord) -> list[Finding]:
    if len(page.scripts) <= HEAVY_SCRIPT_COUNT or _contains_any(page.html_content, LOADING_MARKERS):
        return []
    return finding(
        "No loading indicators detected despite heavy JavaScript usage",
        script_count=len(page.scripts),
    )


def _form_validation(page: PageRecord) -> list[Finding]:
    return [
        _form_finding(index, form.action, "may lack proper validation and error handling")
        for index, form in enumerate(page.forms)
        if not _contains_any(form.html, VALIDATION_MARKERS)
    ]


def _focus_management(page: PageRecord) -> list[Finding]:
    if _contains_any(page.html_content, FOCUS_MARKERS):
        return []
    return finding("No focus management patterns detected", location=page.url)


class UIUXAnalyzer(BaseAnalyzer):
    """Checks mobile readiness, forms, navigation and interaction affordances."""

    test_type = TestType.UI_UX
    checks = (
        Check(
            "no_mobile_viewport",
            "high",
            20,
            _viewport,
            Recommendation(
                priority="high",
                message="Add viewport meta tag for proper mobile display",
                impact="Essential for mobile user experience and responsive design",
            ),
        ),
        Check(
            "no_responsive_design",
            "medium",
            15,
            _responsive,
            Recommendation(
                priority="medium",
                message="Implement responsive design with CSS media queries",
                impact="Improves user experience across different device sizes",
            ),
        ),
        Check(
            "form_no_submit",
            "medium",
            10,
            _submit_controls,
            Recommendation(
                priority="medium",
                message="Ensure all forms have clear submit buttons",
                impact="Essential for form completion and user task flow",
            ),
        ),
        Check(
            "placeholder_only_labels",
            "medium",
            10,
            _placeholder_labels,
            Recommendation(
                priority="medium",
                message="Use proper labels instead of relying solely on placeholder text",
                impact="Improves accessibility and user experience",
            ),
        ),
        Check(
            "no_navigation",
            "medium",
            15,
            _navigation,
            Recommendation(
                priority="medium",
                message="Add clear navigation menu for better user experience",
                impact="Helps users understand site structure and find content",
            ),
        ),
        Check(
            "no_loading_states",
            "low",
            5,
            _loading_states,
            Recommendation(
                priority="low",
                message="Add loading states for better perceived performance",
                impact="Improves user experience during content loading",
            ),
        ),
        Check(
            "no_form_validation",
            "low",
            5,
            _form_validation,
            Recommendation(
                priority="low",
                message="Implement client-side validation with clear error messages",
                impact="Reduces user frustration and improves form completion rates",
            ),
        ),
        Check(
            "poor_focus_management",
            "medium",
            10,
            _focus_management,
            Recommendation(
                priority="medium",
                message="Implement proper focus management for keyboard navigation",
                impact="Essential for accessibility and keyboard-only users",
            ),
        ),
    )

    def degraded(self, page: PageRecord) -> TestOutcome:
        return self._outcome(LIMITED_SCORE, [], list(LIMITED_RECOMMENDATIONS))
