"""Security analyzer."""

import re

from ..models import PageRecord, Recommendation, TestOutcome, TestType
from .base import BaseAnalyzer, Check, Finding, finding, form_label

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_SCRIPT_OPEN = re.compile(r"<script[^>]*>", re.IGNORECASE)

HTTPS_RECOMMENDATION = Recommendation(
    priority="high",
    message="Implement SSL/TLS certificate to enable HTTPS",
    impact="Protects user data in transit and improves SEO ranking",
)

MONITOR_RECOMMENDATION = Recommendation(
    priority="low",
    message="Continue monitoring SSL certificate expiry and renewal",
    impact="Maintains secure connections for users",
)


def _insecure_protocol(page: PageRecord) -> list[Finding]:
    if page.url.startswith("https://"):
        return []
    return finding("Website is not using HTTPS", location=page.url)


def _mixed_content(page: PageRecord) -> list[Finding]:
    resources = [
        url
        for url in (*page.images, *page.scripts, *page.stylesheets)
        if url.startswith("http://")
    ]
    if not resources:
        return []
    return finding(f"Found {len(resources)} insecure resources", resources=resources)


def _inline_scripts(page: PageRecord) -> list[Finding]:
    inline = [
        block
        for block in _SCRIPT_BLOCK.findall(page.html_content)
        if "src=" not in _SCRIPT_OPEN.match(block).group(0)
    ]
    if not inline:
        return []
    return finding(f"Found {len(inline)} inline scripts", count=len(inline))


def _csrf(page: PageRecord) -> list[Finding]:
    # Substring match on the form markup only.
    found = []
    for index, form in enumerate(page.forms):
        if form.method.upper() != "POST":
            continue
        if "csrf" in form.html or "_token" in form.html:
            continue
        found.append(
            {
                "message": f"{form_label(index)} may be vulnerable to CSRF attacks",
                "form": form.action or "Unknown action",
            }
        )
    return found


class SecurityAnalyzer(BaseAnalyzer):
    """Checks transport security, mixed content, inline scripts and CSRF hints."""

    test_type = TestType.SECURITY
    checks = (
        Check("insecure_protocol", "high", 30, _insecure_protocol, HTTPS_RECOMMENDATION),
        Check(
            "mixed_content",
            "medium",
            15,
            _mixed_content,
            Recommendation(
                priority="medium",
                message="Update all HTTP resources to use HTTPS",
                impact="Prevents mixed content warnings and security vulnerabilities",
            ),
        ),
        Check(
            "inline_scripts",
            "medium",
            10,
            _inline_scripts,
            Recommendation(
                priority="medium",
                message="Move inline scripts to external files and implement Content Security Policy",
                impact="Reduces XSS attack surface and improves security posture",
            ),
        ),
        Check(
            "csrf_vulnerability",
            "high",
            20,
            _csrf,
            Recommendation(
                priority="high",
                message="Implement CSRF protection for all forms",
                impact="Prevents Cross-Site Request Forgery attacks",
            ),
        ),
    )

    def degraded(self, page: PageRecord) -> TestOutcome:
        """Only the URL scheme can be judged without markup."""
        outcome = self._run(page, self.checks[:1])
        if outcome.issues:
            return outcome
        return self._outcome(100, [], [MONITOR_RECOMMENDATION])
