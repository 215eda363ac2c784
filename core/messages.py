from dataclasses import dataclass, field

BATCH_SMS_PREFIX = "batch_sms:"


@dataclass(frozen=True)
class SmsCommand:
    """Batched SMS command understood by the downstream gateway."""

    message: str
    recipients: tuple[str, ...] = field(default_factory=tuple)

    def to_payload(self) -> str:
        # e.g. "batch_sms:Truck is in Brgy Acacia (+639171234567,+639181234567)"
        return f"{BATCH_SMS_PREFIX}{self.message} ({','.join(self.recipients)})"
