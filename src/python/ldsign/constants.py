"""JSON-LD context URLs and proof constants."""

CREDENTIALS_CONTEXT_V1_URL = "https://www.w3.org/2018/credentials/v1"
SECURITY_CONTEXT_ED25519_2020_URL = "https://w3id.org/security/suites/ed25519-2020/v1"
DID_V1_CONTEXT_URL = "https://www.w3.org/ns/did/v1"

VERIFIABLE_CREDENTIAL_TYPE = "VerifiableCredential"
ED25519_VERIFICATION_KEY_2020 = "Ed25519VerificationKey2020"

# Proof fields that carry the signature and are excluded from the verify data
PROOF_VALUE_FIELDS = ("proofValue", "jws", "signatureValue")
