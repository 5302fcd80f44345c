from spinecheck.schemas.analysis import AnalysisResult, Interpretation

ANGLE_PLACEHOLDER = "--"

# tier, text key, Korean text, English text
_TIERS: dict[str, tuple[str, str, str, str]] = {
    "normal": (
        "ok",
        "result.normal",
        "척추가 정상 범위에 있습니다.",
        "Your spine is within the normal range.",
    ),
    "mild": (
        "warning",
        "result.mild",
        "경미한 척추측만증이 의심됩니다. 전문의와 상담을 권장합니다.",
        "Mild scoliosis is suspected. A consultation with a specialist is recommended.",
    ),
    "high-risk": (
        "danger",
        "result.high_risk",
        "척추측만증 고위험군으로 분류됩니다. 빠른 시일 내에 전문가의 진단이 필요합니다.",
        "Classified as high risk for scoliosis. Please see a specialist as soon as possible.",
    ),
    "inconclusive": (
        "neutral",
        "result.inconclusive",
        "사진으로 각도를 측정할 수 없습니다. 밝은 곳에서 등 전체가 보이도록 다시 촬영해주세요.",
        "The angle could not be measured. Retake the photo in good light with the whole back visible.",
    ),
}

_FALLBACK = (
    "neutral",
    "result.check",
    "분석 결과를 확인하세요.",
    "Please check your results.",
)


def interpret(classification: str | None, lang: str = "ko") -> Interpretation:
    """Map a classification onto a display tier and explanatory text.

    Never raises: unknown or empty values get the neutral fallback.
    """
    key = (classification or "").strip().lower()
    tier, text_key, ko, en = _TIERS.get(key, _FALLBACK)
    return Interpretation(tier=tier, text_key=text_key, text=en if lang == "en" else ko)


def format_angle(result: AnalysisResult | None) -> str:
    if result is None:
        return ""
    if result.is_inconclusive:
        return ANGLE_PLACEHOLDER
    return f"{result.cobb_angle:.1f}"
