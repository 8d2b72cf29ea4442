class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    SESSIONS = V1 + "/sessions"
    SESSION = SESSIONS + "/{session_id}"
    CHAT = V1 + "/chat/{session_id}"
    CHAT_MESSAGES = CHAT + "/messages"
    CHAT_CLEAR = CHAT + "/clear"
    CHAT_REMOVE_PDF = CHAT + "/remove-pdf"
    ADMIN_BULLETINS = V1 + "/admin/bulletins"
    ADMIN_DOCUMENTS = V1 + "/admin/documents"
    STUDENT = V1 + "/students/{student_id}"
    STUDENT_PREREQUISITES = STUDENT + "/prerequisites/{course_code}"
    STUDENT_CONFLICTS = STUDENT + "/conflicts"
    STUDENT_CONFLICTS_CHECK = STUDENT_CONFLICTS + "/check"
    STUDENT_GPA = STUDENT + "/gpa"
    STUDENT_GPA_WHAT_IF = STUDENT_GPA + "/what-if"
    STUDENT_GPA_NEEDED = STUDENT_GPA + "/needed"


class UploadPrefixes:
    LOCAL = "/uploads/"
    BULLETINS = "bulletins"
    MINORS = "minors"
    DOCUMENTS = "documents"


OCR_REQUIRED_NOTICE = (
    "(No text extracted. If the PDF is scanned (image-only), OCR is required.)"
)
NO_STUDENT_CONTEXT = "(No student DB context loaded.)"
