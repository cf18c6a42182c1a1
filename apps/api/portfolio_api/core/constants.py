class JobDescriptionFetch:
    MAX_REDIRECTS = 5
    URL_FETCH_TIMEOUT_MS = 10000
    MAX_RESPONSE_SIZE = 1024 * 1024  # 1 MiB, declared and observed
    MIN_EXTRACTED_CONTENT_LENGTH = 100
    MIN_JD_KEYWORDS = 2

    GUIDANCE = "Please provide the job description text directly."


# Terms that show up on nearly every job posting; matched case-insensitively.
JD_KEYWORDS: tuple[str, ...] = (
    "responsibilities",
    "qualifications",
    "requirements",
    "experience",
    "skills",
    "job description",
    "position",
    "duties",
    "about the role",
    "what you'll do",
    "who you are",
    "what we're looking for",
    "minimum requirements",
    "preferred qualifications",
    "about this job",
    "the role",
    "your responsibilities",
    "must have",
    "nice to have",
    "benefits",
    "compensation",
    "salary",
    "apply",
)
