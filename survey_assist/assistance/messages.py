from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class MessageCatalog:
	"""Fixed respondent-facing strings for one target language."""

	code: str
	language_name: str
	no_answer: str
	number_label: str
	selected_label: str
	images_label: str
	no_images: str
	no_comment: str
	rating_label: str
	video_uploaded: str
	no_video: str
	retry_exhausted_feedback: str
	assistance_disabled_feedback: str
	confidence_gated_feedback: str
	fallback_feedback: str
	encouraging_prefix: str
	positive_markers: Tuple[str, ...]
	local_introduction: str


ENGLISH = MessageCatalog(
	code="en",
	language_name="English",
	no_answer="No answer provided",
	number_label="Number: {value}",
	selected_label="Selected: {value}",
	images_label="Uploaded {count} image(s) with comments: {comments}",
	no_images="No images uploaded",
	no_comment="No comment",
	rating_label="Rating: {value}",
	video_uploaded="Video uploaded",
	no_video="No video uploaded",
	retry_exhausted_feedback="Thank you for your answer! Let's move on to the next question.",
	assistance_disabled_feedback="Thanks, your answer has been recorded.",
	confidence_gated_feedback="Thank you for your answer!",
	fallback_feedback="Thank you for your answer! Let's continue.",
	encouraging_prefix="Thanks for sharing! ",
	positive_markers=("thank", "great", "good", "appreciate", "nice"),
	local_introduction="Great, let's continue with the next question.",
)

POLISH = MessageCatalog(
	code="pl",
	language_name="Polish",
	no_answer="Nie udzielono odpowiedzi",
	number_label="Liczba: {value}",
	selected_label="Wybrano: {value}",
	images_label="Przesłano {count} zdjęcie/ć z komentarzami: {comments}",
	no_images="Nie przesłano zdjęć",
	no_comment="Brak komentarza",
	rating_label="Ocena: {value}",
	video_uploaded="Przesłano wideo",
	no_video="Nie przesłano wideo",
	retry_exhausted_feedback="Dziękuję za odpowiedź! Przejdźmy do następnego pytania.",
	assistance_disabled_feedback="Dziękuję, odpowiedź została zapisana.",
	confidence_gated_feedback="Dziękuję za odpowiedź!",
	fallback_feedback="Dziękuję za odpowiedź! Kontynuujmy.",
	encouraging_prefix="Dziękuję za podzielenie się! ",
	positive_markers=("dziękuj", "dzięki", "świetn", "dobr", "super"),
	local_introduction="Świetnie, przejdźmy do kolejnego pytania.",
)

CATALOGS: Dict[str, MessageCatalog] = {
	ENGLISH.code: ENGLISH,
	POLISH.code: POLISH,
}

DEFAULT_CATALOG = ENGLISH

POSITIVE_MARKERS: Tuple[str, ...] = tuple(
	dict.fromkeys(marker for catalog in CATALOGS.values() for marker in catalog.positive_markers)
)


def catalog_for(code: str) -> MessageCatalog:
	key = code.strip().lower()
	if key not in CATALOGS:
		raise ValueError(f"Unsupported language '{code}'. Supported: {', '.join(sorted(CATALOGS))}.")
	return CATALOGS[key]


def language_directive(catalog: MessageCatalog) -> str:
	return (
		f"IMPORTANT: Respond ONLY in {catalog.language_name}. "
		f"Every word of feedback shown to the respondent must be in {catalog.language_name}; never mix languages."
	)
