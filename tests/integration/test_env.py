"""环境层测试"""
import pytest
import numpy as np

from core.cards import SPADE_THREE, cards_to_array, str_to_cards
from core.state import GameState
from core.actions import Action
from core.errors import PASS_ON_EMPTY_FIELD, STALE_VERSION

C = str_to_cards

FILLER = [
    C("3♥ 4♥ 5♥ 6♥ 7♥ 9♥ 10♥ J♥ Q♥ K♥"),
    C("3♦ 4♦ 5♦ 6♦ 7♦ 9♦ 10♦ J♦ Q♦ K♦"),
    C("3♣ 4♣ 5♣ 6♣ 7♣ 9♣ 10♣ J♣ Q♣ K♣"),
]


def env_with(hand: str, **env_kwargs):
    """重置后换成指定残局，座位 0 先出"""
    from env import DaifugoEnv

    env = DaifugoEnv(**env_kwargs)
    env.reset(seed=0)
    env._state = GameState.from_hands([C(hand)] + FILLER, turn=0)
    return env


class TestObservationBuilder:
    """ObservationBuilder 测试"""

    def test_build_initial(self):
        from env.observation import ObservationBuilder

        builder = ObservationBuilder()
        state = GameState.initial([1, 2, 3, 4], seed=42)
        obs = builder.build(state)

        assert obs.hand.shape == (54,)
        assert obs.hand.sum() == len(state.current_hand)
        assert obs.position.shape == (4,)
        assert obs.position.sum() == 1  # one-hot
        assert obs.played_cards.shape == (4, 54)
        assert obs.history.shape == (16, 54)
        assert obs.flags.shape == (4,)
        assert obs.flags[1] == 1  # 新场
        assert len(obs.legal_actions) > 0

    def test_other_perspective(self):
        from env.observation import ObservationBuilder

        state = GameState.from_hands([C("4♠")] + FILLER, turn=0)
        obs = ObservationBuilder().build(state, perspective=2)

        assert obs.position[2] == 1
        assert obs.hand.sum() == 10
        assert obs.legal_actions == []

    def test_after_play(self):
        from env.observation import ObservationBuilder

        state = GameState.from_hands([C("4♠ 9♠")] + FILLER, turn=0)
        state = state.with_action(Action.from_cards(C("4♠")))
        obs = ObservationBuilder(history_length=4).build(state, perspective=0)

        assert obs.played_cards[0].sum() == 1
        assert obs.history.shape == (4, 54)
        assert np.array_equal(obs.history[0], cards_to_array(C("4♠")))
        assert np.array_equal(obs.field, cards_to_array(C("4♠")))
        assert obs.flags[1] == 0

    def test_to_dict(self):
        from env.observation import ObservationBuilder

        obs = ObservationBuilder().build(GameState.initial([1, 2, 3, 4], seed=42))
        obs_dict = obs.to_dict()

        assert "hand" in obs_dict
        assert "played_cards" in obs_dict
        assert "history" in obs_dict
        assert "legal_actions" not in obs_dict

    def test_to_flat_array(self):
        from env.observation import ObservationBuilder

        obs = ObservationBuilder().build(GameState.initial([1, 2, 3, 4], seed=42))
        flat = obs.to_flat_array()

        assert isinstance(flat, np.ndarray)
        assert flat.ndim == 1
        assert flat.shape == (54 * 2 + 4 * 54 + 16 * 54 + 4 * 5,)


class TestDaifugoEnv:
    """DaifugoEnv 测试"""

    def test_reset(self):
        from env import DaifugoEnv

        env = DaifugoEnv()
        obs, info = env.reset(seed=42)

        assert "hand" in obs
        assert obs["hand"].shape == (54,)
        assert info["phase"] == "playing"
        assert sorted(info["hand_sizes"]) == [13, 13, 14, 14]
        assert SPADE_THREE in env.state.get_hand(info["current_player"])
        assert len(set(p.character_id for p in env.state.players)) == 4
        assert env.observation_space.contains(obs)

    def test_reset_with_characters(self):
        from env import DaifugoEnv

        env = DaifugoEnv()
        env.reset(seed=0, options={"character_ids": [11, 7, 3, 5]})

        assert [p.character_id for p in env.state.players] == [11, 7, 3, 5]

    def test_reset_unknown_character(self):
        from env import DaifugoEnv
        from core.errors import ConfigurationError

        env = DaifugoEnv()
        with pytest.raises(ConfigurationError):
            env.reset(seed=0, options={"character_ids": [1, 2, 3, 42]})

    def test_same_seed_same_deal(self):
        from env import DaifugoEnv

        env_a, env_b = DaifugoEnv(), DaifugoEnv()
        obs_a, _ = env_a.reset(seed=7)
        obs_b, _ = env_b.reset(seed=7)

        assert np.array_equal(obs_a["hand"], obs_b["hand"])
        assert [p.character_id for p in env_a.state.players] == [p.character_id for p in env_b.state.players]

    def test_step_before_reset(self):
        from env import DaifugoEnv

        env = DaifugoEnv()
        with pytest.raises(RuntimeError):
            env.step(0)

    def test_step_with_index(self):
        from env import DaifugoEnv

        env = DaifugoEnv()
        obs, info = env.reset(seed=42)
        actor = info["current_player"]

        obs, reward, terminated, truncated, info = env.step(0)

        assert "error" not in info
        assert info["actor"] == actor
        assert info["version"] == 1
        assert not terminated
        assert not truncated
        assert set(info["rewards"]) == {0, 1, 2, 3}

    def test_step_with_action_and_mask(self):
        env = env_with("4♠ 9♠ K♠")

        _, _, _, _, info = env.step(Action.from_cards(C("4♠")))
        assert "error" not in info
        assert env.state.turn == 1

        _, _, _, _, info = env.step(cards_to_array(C("5♥")))
        assert "error" not in info
        assert env.state.field_cards == tuple(C("5♥"))

    def test_invalid_index(self):
        env = env_with("4♠ 9♠")
        with pytest.raises(ValueError):
            env.step(99)

    def test_rejected_submission(self):
        env = env_with("4♠ 9♠")
        version = env.state.version

        _, reward, _, _, info = env.step(np.zeros(54, dtype=np.float32))

        assert info["error"] == PASS_ON_EMPTY_FIELD
        assert reward == -1.0
        assert env.state.version == version
        assert env.idle_steps == 1

    def test_stale_submission(self):
        env = env_with("4♠ 9♠")
        state = env.state

        _, reward, _, _, info = env.submit(Action.from_cards(C("4♠")), 0, state.version + 1)
        assert info["error"] == STALE_VERSION
        assert reward == -1.0
        assert env.state is state

        _, _, _, _, info = env.submit(Action.from_cards(C("4♠")), 0, state.version)
        assert "error" not in info

    def test_watchdog_advance(self):
        env = env_with("4♠ 9♠")

        for _ in range(2):
            _, _, _, _, info = env.submit(None)
            assert info["error"] == "NO_SUBMISSION"
            assert env.state.turn == 0

        _, _, _, _, info = env.submit(None)
        assert info["emergency_advance"]
        assert env.state.turn == 1
        assert env.idle_steps == 0

    def test_eight_cut_completes_on_next_submit(self):
        env = env_with("8♠ 4♠")

        _, _, _, _, info = env.step(Action.from_cards(C("8♠")))
        assert info["effects"].eight_cut_triggered
        assert info["eight_cut_pending"]
        assert info["legal_actions"] == []
        assert env.state.field_cards == tuple(C("8♠"))

        _, _, _, _, info = env.step(None)
        assert info["eight_cut_completed"] == 0
        assert info["effects"].field_cleared
        assert "discarded" not in info
        assert env.state.field.is_empty
        assert env.state.turn == 0

    def test_eight_cut_discards_submission(self):
        env = env_with("8♠ 4♠")
        env.step(Action.from_cards(C("8♠")))

        _, reward, _, _, info = env.step(Action.from_cards(C("4♠")))
        assert info["discarded"]
        assert reward == 0.0
        assert env.state.get_hand(0) == tuple(C("4♠"))

    def test_sparse_reward_on_finish(self):
        env = env_with("9♠")

        _, reward, terminated, _, info = env.step(Action.from_cards(C("9♠")))

        assert reward == 1.0
        assert info["rewards"][0] == 1.0
        assert info["rewards"][1] == 0.0
        assert not terminated

    def test_shaped_reward(self):
        from env import TableConfig

        env = env_with("9♠ 4♠", config=TableConfig(reward_type="shaped"))

        _, reward, _, _, _ = env.step(Action.from_cards(C("4♠")))
        assert reward == pytest.approx(0.01)

        env = env_with("9♠", config=TableConfig(reward_type="shaped"))
        _, reward, _, _, _ = env.step(Action.from_cards(C("9♠")))
        assert reward == pytest.approx(1.01)

    def test_full_game(self):
        from env import DaifugoEnv

        env = DaifugoEnv()
        obs, info = env.reset(seed=123)

        done = False
        steps = 0
        while not done and steps < 2000:
            action = env.sample_action()
            obs, reward, terminated, truncated, info = env.step(action)
            assert "error" not in info
            done = terminated or truncated
            steps += 1

        assert terminated
        assert sorted(info["standings"]) == [0, 1, 2, 3]
        assert set(info["roles"].values()) == {'大富豪', '富豪', '貧民', '大貧民'}

        with pytest.raises(RuntimeError):
            env.step(None)

    def test_render_ansi(self):
        from env import DaifugoEnv

        env = DaifugoEnv(render_mode="ansi")
        env.reset(seed=0, options={"character_ids": [1, 2, 3, 4]})

        output = env.render()
        assert "1主" in output
        assert "Field: -" in output

    def test_truncation(self):
        from env import TableConfig

        env = env_with("4♠ 9♠", config=TableConfig(max_steps=1))
        _, _, terminated, truncated, _ = env.step(Action.from_cards(C("4♠")))

        assert not terminated
        assert truncated


class TestRewardCalculator:
    """RewardCalculator 测试"""

    def test_sparse_no_reward_mid_game(self):
        from env.reward import create_reward_calculator

        calc = create_reward_calculator("sparse")
        prev = GameState.from_hands([C("4♠ 9♠")] + FILLER, turn=0)
        state = prev.with_action(Action.from_cards(C("4♠")))

        assert calc.compute(state, prev, 0) == 0.0

    def test_shaped_foul_penalty(self):
        from env.reward import create_reward_calculator

        calc = create_reward_calculator("shaped")
        prev = GameState.from_hands([C("2♠")] + FILLER, turn=0)
        state = prev.with_action(Action.from_cards(C("2♠")))

        assert state.get_player(0).is_foul_finished
        rank_reward = calc.config.rank_rewards[state.rank_of(0)]
        assert calc.compute(state, prev, 0) == pytest.approx(rank_reward + 0.01 - 0.5)

    def test_compute_all(self):
        from env.reward import RewardCalculator

        state = GameState.from_hands([C("4♠")] + FILLER, turn=0)
        rewards = RewardCalculator().compute_all(state)

        assert set(rewards) == {0, 1, 2, 3}


class TestMakeEnv:
    """make_env 测试"""

    def test_from_dict(self):
        from env import make_env

        env = make_env({"reward_type": "shaped", "character_ids": [4, 3, 2, 1], "unknown": 1})

        assert env.config.reward_type == "shaped"
        env.reset(seed=0)
        assert [p.character_id for p in env.state.players] == [4, 3, 2, 1]

    def test_default(self):
        from env import DaifugoEnv, make_env

        env = make_env()
        assert isinstance(env, DaifugoEnv)
        assert env.config.max_idle_steps == 3
