"""Unit tests for ownership and reward reconciliation.

Tests cover:
- Ownership resolution (minter, latest transfer, same-block ordering)
- Idempotence and duplicate events
- Inventory building with like enrichment and content-ref normalization
- Burn-address exclusion and case-insensitive owners
- Burn decision arithmetic
"""

import copy

import pytest

from conftest import ALICE, BOB, BURN, CAROL, make_minted, make_transfer
from hehehub.models.events import MintedEvent, TransferredEvent
from hehehub.models.inventory import BurnDecision, Item, Post
from hehehub.services.reconciler import (
    OwnershipIndex,
    build_inventory,
    compute_reward,
    normalize_content_ref,
    resolve_ownership,
)

A = ALICE.lower()
B = BOB.lower()
C = CAROL.lower()


class TestResolveOwnership:
    """Test resolve_ownership() over raw and typed events."""

    def test_minter_owns_item_without_transfers(self):
        index = resolve_ownership([make_minted(1, ALICE, "u/1.png", block=3)])

        assert index == {1: A}
        assert index.owner_of(1) == A

    def test_latest_transfer_wins_regardless_of_input_order(self):
        events = [
            make_transfer(1, BOB, CAROL, block=20),
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(1, ALICE, BOB, block=10),
        ]

        assert resolve_ownership(events).owner_of(1) == C

    def test_transfer_back_to_original_owner(self):
        """A -> B at block 5, then B -> A at block 10: A owns it again."""
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(1, ALICE, BOB, block=5),
            make_transfer(1, BOB, ALICE, block=10),
        ]

        assert resolve_ownership(events).owner_of(1) == A

    def test_same_block_transfers_later_input_wins(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(1, ALICE, BOB, block=7, log_index=1),
            make_transfer(1, BOB, CAROL, block=7, log_index=2),
        ]

        assert resolve_ownership(events).owner_of(1) == C

        # Swapping the input order swaps the winner
        swapped = [events[0], events[2], events[1]]
        assert resolve_ownership(swapped).owner_of(1) == B

    def test_same_block_round_trip_keeps_every_transfer(self):
        """A -> B, B -> A, A -> B in one block are three logs, not duplicates."""
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(1, ALICE, BOB, block=7, log_index=1),
            make_transfer(1, BOB, ALICE, block=7, log_index=2),
            make_transfer(1, ALICE, BOB, block=7, log_index=3),
        ]
        index = resolve_ownership(events)

        assert index.owner_of(1) == B
        assert build_inventory(index, events, ALICE, []) == []
        assert [item.item_id for item in build_inventory(index, events, BOB, [])] == [1]

    def test_same_log_seen_twice_counts_once(self):
        transfer = make_transfer(1, ALICE, BOB, block=7, log_index=1)
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            transfer,
            make_transfer(1, BOB, ALICE, block=7, log_index=2),
            dict(transfer),
        ]

        assert resolve_ownership(events).owner_of(1) == A

    def test_transfer_of_unminted_item_is_ignored(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(99, ALICE, BOB, block=2),
        ]

        index = resolve_ownership(events)

        assert 99 not in index
        assert index.owner_of(99) is None
        assert len(index) == 1

    def test_duplicate_mint_keeps_earliest(self):
        events = [
            make_minted(1, BOB, "u/late.png", block=9),
            make_minted(1, ALICE, "u/early.png", block=2),
        ]

        assert resolve_ownership(events).owner_of(1) == A

    def test_addresses_are_lowercased(self):
        index = resolve_ownership([make_minted(1, ALICE.upper().replace("0X", "0x"), "u", 1)])

        assert index.owner_of(1) == A

    def test_malformed_and_unknown_events_are_skipped(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            {"event_name": "Approval", "args": {"tokenId": 1}, "block_number": 2},
            {"event_name": "Transfer", "args": {"from": ALICE, "to": "nope", "tokenId": 1},
             "block_number": 3},
            {"event_name": "MemeMinted", "args": {"tokenId": -1, "minter": BOB, "memeUrl": "x"},
             "block_number": 4},
            {"event_name": "Transfer", "block_number": 5},
            "not an event",
            None,
        ]

        assert resolve_ownership(events) == {1: A}

    def test_accepts_typed_events(self):
        events = [
            MintedEvent(item_id=1, minter_address=ALICE, content_ref="u/1", block_sequence=1),
            TransferredEvent(item_id=1, from_address=ALICE, to_address=BOB, block_sequence=2),
        ]

        assert resolve_ownership(events).owner_of(1) == B

    def test_idempotent(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_minted(2, BOB, "u/2.png", block=2),
            make_transfer(1, ALICE, CAROL, block=3),
        ]

        first = resolve_ownership(events)
        second = resolve_ownership(events)

        assert first == second
        assert list(first) == list(second)

    def test_duplicated_log_gives_same_index(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(1, ALICE, BOB, block=3),
        ]

        assert resolve_ownership(events + events) == resolve_ownership(events)

    def test_does_not_mutate_input(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(1, ALICE, BOB, block=3),
        ]
        snapshot = copy.deepcopy(events)

        resolve_ownership(events)

        assert events == snapshot

    def test_empty_log(self):
        assert resolve_ownership([]) == {}


class TestOwnershipIndex:
    """Test OwnershipIndex queries."""

    def test_items_owned_by_is_case_insensitive(self):
        index = OwnershipIndex({1: A, 2: B, 3: A})

        assert index.items_owned_by(ALICE.upper().replace("0X", "0x")) == [1, 3]
        assert index.items_owned_by(B) == [2]

    def test_items_owned_by_invalid_address(self):
        assert OwnershipIndex({1: A}).items_owned_by("alice") == []


class TestNormalizeContentRef:
    """Test normalize_content_ref()."""

    @pytest.mark.parametrize(
        ("content_ref", "expected"),
        [
            ("https://x/a.png?v=2", "https://x/a"),
            ("https://x/a.jpg", "https://x/a"),
            ("u/1.png", "u/1"),
            ("https://cdn.example.com/memes/abc", "https://cdn.example.com/memes/abc"),
            ("https://x/archive.tar.gz", "https://x/archive.tar"),
            ("https://x/a?format=a.png", "https://x/a"),
            ("https://example.com", "https://example.com"),
            ("https://example.com?ref=feed", "https://example.com"),
            ("https://example.com/", "https://example.com/"),
            ("https://cdn.example.com/a.png", "https://cdn.example.com/a"),
            ("", ""),
        ],
    )
    def test_normalization(self, content_ref, expected):
        assert normalize_content_ref(content_ref) == expected

    def test_different_extensions_share_a_key(self):
        assert normalize_content_ref("https://x/a.png?v=2") == normalize_content_ref(
            "https://x/a.webp"
        )


class TestBuildInventory:
    """Test build_inventory() enrichment and filtering."""

    def test_single_mint_with_matching_post(self):
        events = [make_minted(1, ALICE, "u/1.png", block=1)]
        posts = [Post(content_ref="u/1.png", like_count=5)]

        items = build_inventory(resolve_ownership(events), events, ALICE, posts)

        assert items == [Item(item_id=1, content_ref="u/1.png", like_count=5)]
        assert compute_reward(items[0]) == BurnDecision(eligible=True, reward_quantum=2)

    def test_matches_across_extension_and_query(self):
        events = [make_minted(1, ALICE, "https://x/a.png", block=1)]
        posts = [Post(content_ref="https://x/a.jpg?v=3", like_count=8)]

        items = build_inventory(resolve_ownership(events), events, ALICE, posts)

        assert items[0].like_count == 8

    def test_item_without_post_has_zero_likes(self):
        events = [make_minted(1, ALICE, "u/1.png", block=1)]
        posts = [Post(content_ref="u/2.png", like_count=50)]

        items = build_inventory(resolve_ownership(events), events, ALICE, posts)

        assert items == [Item(item_id=1, content_ref="u/1.png", like_count=0)]

    def test_first_post_wins_for_same_key(self):
        events = [make_minted(1, ALICE, "u/1.png", block=1)]
        posts = [
            Post(content_ref="u/1.jpg", like_count=4),
            Post(content_ref="u/1.png", like_count=40),
        ]

        items = build_inventory(resolve_ownership(events), events, ALICE, posts)

        assert items[0].like_count == 4

    def test_accepts_post_mappings(self):
        events = [make_minted(1, ALICE, "u/1.png", block=1)]
        posts = [{"contentRef": "u/1.png", "likeCount": 6}, {"contentRef": None}]

        items = build_inventory(resolve_ownership(events), events, ALICE, posts)

        assert items[0].like_count == 6

    def test_only_owner_items_in_mint_order(self):
        events = [
            make_minted(3, ALICE, "u/3.png", block=1),
            make_minted(1, BOB, "u/1.png", block=2),
            make_minted(2, ALICE, "u/2.png", block=3),
            make_transfer(1, BOB, ALICE, block=4),
            make_transfer(3, ALICE, CAROL, block=5),
        ]

        items = build_inventory(resolve_ownership(events), events, ALICE, [])

        assert [item.item_id for item in items] == [1, 2]

    def test_burned_item_is_excluded(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_minted(2, ALICE, "u/2.png", block=1, log_index=1),
            make_transfer(1, ALICE, BURN, block=8),
        ]
        index = resolve_ownership(events)

        items = build_inventory(index, events, ALICE, [])

        assert [item.item_id for item in items] == [2]
        # Burned items still exist in the index, owned by the burn address
        assert index.owner_of(1) == BURN.lower()

    def test_burn_address_has_no_inventory(self):
        events = [
            make_minted(1, ALICE, "u/1.png", block=1),
            make_transfer(1, ALICE, BURN, block=2),
        ]

        assert build_inventory(resolve_ownership(events), events, BURN, []) == []
        assert build_inventory(resolve_ownership(events), events, BURN.lower(), []) == []

    def test_owner_query_is_case_insensitive(self):
        events = [make_minted(1, ALICE, "u/1.png", block=1)]
        index = resolve_ownership(events)

        assert build_inventory(index, events, ALICE.lower(), []) == build_inventory(
            index, events, ALICE.upper().replace("0X", "0x"), []
        )

    def test_invalid_owner_returns_empty(self):
        events = [make_minted(1, ALICE, "u/1.png", block=1)]

        assert build_inventory(resolve_ownership(events), events, "0x123", []) == []

    def test_does_not_mutate_inputs(self):
        events = [make_minted(1, ALICE, "u/1.png", block=1)]
        posts = [{"contentRef": "u/1.png", "likeCount": 6}]
        events_snapshot = copy.deepcopy(events)
        posts_snapshot = copy.deepcopy(posts)

        build_inventory(resolve_ownership(events), events, ALICE, posts)

        assert events == events_snapshot
        assert posts == posts_snapshot


class TestComputeReward:
    """Test compute_reward() thresholds and arithmetic."""

    @pytest.mark.parametrize(
        ("likes", "eligible", "reward"),
        [
            (0, False, 0),
            (1, False, 0),
            (3, False, 1),
            (4, True, 2),
            (5, True, 2),
            (7, True, 3),
            (100, True, 50),
        ],
    )
    def test_decision(self, likes, eligible, reward):
        decision = compute_reward(Item(item_id=1, content_ref="u/1.png", like_count=likes))

        assert decision == BurnDecision(eligible=eligible, reward_quantum=reward)
