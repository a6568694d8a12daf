TEST_AUTH_TOKEN = "test-secret-token"
TEST_BASE_URL = "http://files.test"
AUTH_HEADERS = {"Authorization": f"Bearer {TEST_AUTH_TOKEN}"}

TEST_FILE_NAME = "notes.txt"
TEST_FILE_CONTENT = b"Hello, world!"
TEST_FILE_CONTENT_TYPE = "text/plain"

TEST_PDF_NAME = "invoice.pdf"
TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"
TEST_PDF_CONTENT_TYPE = "application/pdf"
