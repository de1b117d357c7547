"""Tests for the vault state machine."""

import dataclasses
import random
import threading

import pytest

from exceptions import (
    InvalidSeedError,
    LastWalletError,
    VaultStateError,
    WalletNotFoundError,
)
from models import SeedPhrase, Vault, VaultState
from vault_store import VaultStore, add_wallet, clear_vault, create_vault, delete_wallet

CANONICAL = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"


class TestPureTransitions:
    """Tests for the pure vault transition functions."""

    def test_create_from_empty(self) -> None:
        """Test creation yields one wallet at index 0."""
        vault = create_vault(Vault.empty(), CANONICAL)
        assert vault.state == VaultState.ACTIVE
        assert [w.account_index for w in vault.wallets] == [0]
        assert str(vault.seed_phrase) == CANONICAL

    def test_create_generates_when_blank(self) -> None:
        """Test blank input generates a fresh 12-word seed."""
        vault = create_vault(Vault.empty(), "   ")
        assert vault.seed_phrase is not None
        assert vault.seed_phrase.word_count == 12
        assert len(vault.wallets) == 1

    def test_create_twice_rejected(self) -> None:
        """Test an active vault cannot be created again."""
        vault = create_vault(Vault.empty(), CANONICAL)
        with pytest.raises(VaultStateError):
            create_vault(vault, CANONICAL)

    def test_inputs_not_mutated(self) -> None:
        """Test transitions return new values."""
        empty = Vault.empty()
        active = create_vault(empty, CANONICAL)
        grown, _ = add_wallet(active)
        assert empty.wallets == ()
        assert len(active.wallets) == 1
        assert len(grown.wallets) == 2

    def test_add_on_empty_rejected(self) -> None:
        """Test add_wallet is invalid while empty."""
        with pytest.raises(VaultStateError):
            add_wallet(Vault.empty())

    def test_delete_on_empty_rejected(self) -> None:
        """Test delete_wallet is invalid while empty."""
        with pytest.raises(VaultStateError):
            delete_wallet(Vault.empty(), "wallet_0_x")

    def test_clear(self) -> None:
        """Test clearing returns the empty vault."""
        vault = clear_vault(create_vault(Vault.empty(), CANONICAL))
        assert vault.state == VaultState.EMPTY
        assert vault.seed_phrase is None
        assert vault.wallets == ()


class TestVaultInvariant:
    """Tests for the consistency checks on Vault itself."""

    @pytest.fixture
    def active(self) -> Vault:
        return create_vault(Vault.empty(), CANONICAL)

    def test_seed_without_wallets_rejected(self, active: Vault) -> None:
        with pytest.raises(ValueError):
            Vault(seed_phrase=active.seed_phrase, wallets=())

    def test_wallets_without_seed_rejected(self, active: Vault) -> None:
        with pytest.raises(ValueError):
            Vault(seed_phrase=None, wallets=active.wallets)

    def test_duplicate_index_rejected(self, active: Vault) -> None:
        """Test two records may not share an account index."""
        first = active.wallets[0]
        twin = dataclasses.replace(first, id="wallet_0_other")
        with pytest.raises(ValueError, match="序号"):
            Vault(seed_phrase=active.seed_phrase, wallets=(first, twin))

    def test_duplicate_id_rejected(self, active: Vault) -> None:
        grown, second = add_wallet(active)
        clash = dataclasses.replace(second, id=grown.wallets[0].id)
        with pytest.raises(ValueError, match="id"):
            Vault(seed_phrase=active.seed_phrase, wallets=(grown.wallets[0], clash))

    def test_store_cannot_wrap_inconsistent_vault(self) -> None:
        """Test a VaultStore can only be seeded with a consistent vault."""
        seed = SeedPhrase(tuple(CANONICAL.split()))
        with pytest.raises(ValueError):
            VaultStore(Vault(seed_phrase=seed))

    def test_store_accepts_consistent_vault(self, active: Vault) -> None:
        store = VaultStore(active)
        assert store.is_active
        assert store.wallets == active.wallets


class TestVaultStore:
    """Tests for the stateful VaultStore."""

    def test_scenario(self) -> None:
        """Test create, add twice, delete index 1, clear, add refused."""
        store = VaultStore()
        assert store.state == VaultState.EMPTY

        store.create_vault("")
        assert store.is_active
        assert len(store) == 1
        assert store.wallets[0].account_index == 0

        store.add_wallet()
        store.add_wallet()
        assert len(store) == 3
        assert {w.account_index for w in store.wallets} == {0, 1, 2}

        second = next(w for w in store.wallets if w.account_index == 1)
        store.delete_wallet(second.id)
        assert len(store) == 2

        store.clear_vault()
        assert store.state == VaultState.EMPTY
        with pytest.raises(VaultStateError):
            store.add_wallet()

    def test_invalid_seed_leaves_state_unchanged(self) -> None:
        """Test a rejected seed does not mutate the vault."""
        store = VaultStore()
        with pytest.raises(InvalidSeedError):
            store.create_vault("abandon abandon abandon")
        assert store.state == VaultState.EMPTY
        assert store.seed_phrase is None

    def test_delete_last_wallet_refused(self) -> None:
        """Test the sole wallet cannot be deleted."""
        store = VaultStore()
        store.create_vault(CANONICAL)
        only = store.wallets[0]
        with pytest.raises(LastWalletError):
            store.delete_wallet(only.id)
        assert store.wallets == (only,)

    def test_delete_unknown_id(self) -> None:
        """Test unknown ids raise WalletNotFoundError."""
        store = VaultStore()
        store.create_vault(CANONICAL)
        store.add_wallet()
        with pytest.raises(WalletNotFoundError):
            store.delete_wallet("wallet_9_missing")
        assert len(store) == 2

    def test_get_wallet(self) -> None:
        """Test lookup by id."""
        store = VaultStore()
        store.create_vault(CANONICAL)
        wallet = store.add_wallet()
        assert store.get_wallet(wallet.id) == wallet
        with pytest.raises(WalletNotFoundError):
            store.get_wallet("nope")

    def test_deletion_keeps_index_gaps(self) -> None:
        """Test deletion never renumbers surviving wallets."""
        store = VaultStore()
        store.create_vault(CANONICAL)
        w1 = store.add_wallet()
        w2 = store.add_wallet()
        store.delete_wallet(w1.id)

        assert [w.account_index for w in store.wallets] == [0, 2]
        assert store.get_wallet(w2.id).ethereum.derivation_path == "m/44'/60'/0'/0/2"

        w3 = store.add_wallet()
        assert w3.account_index == 3
        indices = [w.account_index for w in store.wallets]
        assert len(indices) == len(set(indices))

    def test_same_seed_same_wallets(self) -> None:
        """Test importing the same seed reproduces the same keys."""
        a = VaultStore()
        b = VaultStore()
        a.create_vault(CANONICAL)
        b.create_vault(CANONICAL)
        a.add_wallet()
        b.add_wallet()
        for wa, wb in zip(a.wallets, b.wallets):
            assert wa.ethereum == wb.ethereum
            assert wa.solana == wb.solana
            assert wa.id != wb.id

    def test_ids_unique(self) -> None:
        """Test ids are unique within a vault lifetime."""
        store = VaultStore()
        store.create_vault(CANONICAL)
        seen = {store.wallets[0].id}
        for _ in range(5):
            seen.add(store.add_wallet().id)
        assert len(seen) == 6

    def test_verify(self) -> None:
        """Test the determinism self-check."""
        store = VaultStore()
        assert store.verify()
        store.create_vault(CANONICAL)
        store.add_wallet()
        assert store.verify()

    def test_random_operations_keep_invariants(self) -> None:
        """Test count stays >= 1 and indices stay unique."""
        rng = random.Random(1234)
        store = VaultStore()
        store.create_vault(CANONICAL)
        for _ in range(30):
            if rng.random() < 0.6:
                store.add_wallet()
            else:
                target = rng.choice(store.wallets)
                if len(store) == 1:
                    with pytest.raises(LastWalletError):
                        store.delete_wallet(target.id)
                else:
                    store.delete_wallet(target.id)
            assert len(store) >= 1
            indices = [w.account_index for w in store.wallets]
            assert indices == sorted(set(indices))

    def test_concurrent_adds_serialized(self) -> None:
        """Test adds from several threads never duplicate an index."""
        store = VaultStore()
        store.create_vault(CANONICAL)

        def worker() -> None:
            for _ in range(2):
                store.add_wallet()

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        indices = sorted(w.account_index for w in store.wallets)
        assert indices == list(range(9))

    def test_clear_empty_is_noop(self) -> None:
        """Test clearing an empty vault stays empty."""
        store = VaultStore()
        assert store.clear_vault().state == VaultState.EMPTY
