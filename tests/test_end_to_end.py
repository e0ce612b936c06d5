"""
Shielded and compliant payment flows across the three primitives
"""

import pytest

from sip_privacy import (
    PedersenEngine,
    TransactionRecord,
    decrypt_with_viewing,
    default_generators,
    derive_address,
    derive_child,
    encrypt_for_viewing,
    generate_master_key,
    generate_meta_address,
    get_privacy_config,
    public_key_from_scalar,
    recover_private_key,
    scan_many,
    to_chain_address,
)


@pytest.mark.parametrize("chain,curve", [("solana", "ed25519"), ("arbitrum", "secp256k1")])
def test_shielded_payment(chain, curve):
    config = get_privacy_config("shielded")
    assert config.use_stealth and config.hide_amounts

    recipient = generate_meta_address(chain)
    published = recipient.meta_address.encode()

    # sender
    stealth = derive_address(published)
    engine = PedersenEngine(default_generators(curve))
    c1 = engine.commit(1_000_000_000)
    c2 = engine.commit(500_000_000)
    total = engine.add_commitments(c1, c2)
    r_total = engine.add_blindings(c1.blinding, c2.blinding)

    # recipient
    noise = [derive_address(generate_meta_address(chain).meta_address) for _ in range(10)]
    report = scan_many(
        noise + [stealth], recipient.spending_private_key, recipient.viewing_private_key,
    )
    assert report.matches == [stealth]

    p = recover_private_key(
        stealth, recipient.spending_private_key, recipient.viewing_private_key,
    )
    assert public_key_from_scalar(chain, p) == stealth.address
    assert to_chain_address(stealth).startswith("0x")

    assert engine.verify_opening(total, 1_500_000_000, r_total)
    assert not engine.verify_opening(total, 1_500_000_001, r_total)


def test_compliant_payment():
    master = generate_master_key()
    auditor = derive_child(master, "auditor/2024")
    config = get_privacy_config("compliant", auditor)

    recipient = generate_meta_address("ethereum")
    stealth = derive_address(recipient.meta_address)
    engine = PedersenEngine()
    amount = engine.commit(250)
    sender = engine.commit_identifier("0x1234567890abcdef1234567890abcdef12345678")

    record = TransactionRecord(
        sender=sender.hex(),
        recipient=to_chain_address(stealth),
        amount="250",
        timestamp=1_700_000_000,
    )
    disclosed = encrypt_for_viewing(record, config.viewing_key)

    opened = decrypt_with_viewing(disclosed, auditor)
    assert opened == record
    assert engine.verify_opening(amount, int(opened.amount), amount.blinding)
