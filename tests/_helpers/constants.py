TEST_SECRET = "test-signing-key-with-enough-entropy-0123456789"
TEST_GOOGLE_CLIENT_ID = "test-client-id.apps.googleusercontent.com"
