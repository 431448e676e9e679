"""
どこで: リポジトリ直下 `main.py`。
何を: 同梱の有界変数サンプルをゲージインスペクタで表示し、スクラブ編集できるようにする。
なぜ: 動作確認用の最小エントリポイントとして利用するため。
"""

import logging
import sys

sys.path.append("src")

import numpy as np

from boundviz.core.gauge_config import config_path_from_env, inspector_config, set_config_path
from boundviz.core.variables import (
    Bounded,
    Cooldown,
    Experience,
    Health,
    RegenFloat,
    Reservoir,
    Timer,
)
from boundviz.interactive.gauge_gui import run_gauge_inspector

OBJECTS = {
    "Spawn Timer": Timer(current=1.5, duration=4.0),
    "Dash Cooldown": Cooldown(current=0.25, duration=1.0),
    "PlayerHealth": Health(current=np.int32(63), max=np.int32(100)),
    "Experience": Experience(current=np.int64(420_000)),
    "Fuel Tank": Reservoir(volume=Bounded(current=35.0, max=80.0)),
    "Mana": RegenFloat(value=Bounded(current=10.0, max=50.0), rate=2.5),
}


def tick(dt: float) -> None:
    OBJECTS["Mana"].tick(dt)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    set_config_path(config_path_from_env())
    run_gauge_inspector(OBJECTS, inspector=inspector_config(), on_frame=tick)
