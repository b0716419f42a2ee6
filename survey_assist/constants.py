APP_NAME = "Survey Assist API"
APP_VERSION = "1.0.0"
DEFAULT_CORS_ALLOW_ORIGINS = [
	"http://localhost",
	"http://127.0.0.1",
	"http://localhost:3000",
]
DEFAULT_TRUSTED_HOSTS = [
	"127.0.0.1",
	"localhost",
	"testserver",
]

DEFAULT_MAX_RETRIES = 2
DEFAULT_CONFIDENCE_THRESHOLD = 0.7

SANITIZE_DEFAULT_CHARS = 400
SANITIZE_QUESTION_CHARS = 800
SANITIZE_MESSAGE_CHARS = 1000
MESSAGE_CONTENT_MAX_CHARS = 8000
ANSWER_OBJECT_MAX_CHARS = 200
ANSWER_MAX_CHARS = 2000

EVALUATION_TEMPERATURE = 0.3
INTRODUCTION_TEMPERATURE = 0.7
INTRODUCTION_MAX_OUTPUT_TOKENS = 120

DEBUG_ENVIRONMENTS = ("development", "dev", "local", "test")
