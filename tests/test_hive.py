from hive import Hive, ENTRANCE_TARGET, MEADOW_TARGET


def test_slot_positions():
    assert Hive.slot_position(0) == (25.0, 298.0)
    assert Hive.slot_position(1) == (52.0, 313.0)
    assert Hive.slot_position(2) == (79.0, 298.0)
    assert Hive.slot_position(3) == (25.0, 328.0)
    assert Hive.slot_position(4) == (52.0, 343.0)


def test_beds_fill_from_the_back(hive):
    assert hive.next_free_bed() == Hive.slot_position(3)
    assert hive.claim_next_bed() == Hive.slot_position(3)
    assert hive.next_free_bed() == Hive.slot_position(2)
    assert hive.free_beds() == 3


def test_claimed_beds_are_never_handed_out_twice(hive):
    claimed = [hive.claim_next_bed() for _ in range(4)]
    assert len(set(claimed)) == 4
    assert hive.free_beds() == 0


def test_reset_frees_every_bed(hive):
    hive.claim_next_bed()
    hive.claim_next_bed()
    hive.reset()
    assert hive.free_beds() == 4


def test_entrance_geometry(hive):
    assert not Hive.has_left((100, 300))
    assert Hive.has_left((111, 300))
    assert hive.is_home((60, 300))
    assert not hive.is_home((95, 300))
    assert not hive.is_home((60, 150))          # above the diagonal wall


def test_return_target(hive):
    assert hive.return_target((400, 300)) == ENTRANCE_TARGET
    assert hive.return_target((95, 280)) == ENTRANCE_TARGET
    assert hive.return_target((60, 100)) == MEADOW_TARGET
