import secrets
import time


def generate_order_number(prefix: str = "ORD") -> str:
    """Número legível: timestamp em ms + sufixo aleatório (ex.: ORD-1718000000000-3FA9C)."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(3)[:5].upper()}"
