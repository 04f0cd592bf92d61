import hashlib, json

SECRET_FIELDS = {"password", "password_confirmation", "password_hash"}


def scrub(payload):
    if isinstance(payload, dict):
        return {k: scrub(v) for k, v in payload.items() if k not in SECRET_FIELDS}
    if isinstance(payload, list):
        return [scrub(item) for item in payload]
    return payload


def payload_hash(payload) -> str:
    s = json.dumps(scrub(payload), sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()
