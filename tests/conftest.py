"""
Shared fixtures: a small save document shaped like a real game save.
"""

import pytest

import sav_codec

IRON_PLATE = "/Game/Recipes/CR_IronPlate.CR_IronPlate_C"
AMMO_BOX = "/Game/Recipes/CR_AmmoBox.CR_AmmoBox_C"
PLAYER_ID = "player-0001"


def make_document():
    return {
        "version": 3,
        "itemData": {
            "CrCraftingRecipeOwner": {
                "lockedRecipes": {
                    IRON_PLATE: {
                        "items": [
                            {"item": "/Game/Items/I_IronOre.I_IronOre_C", "count": 5},
                            {"item": "/Game/Items/I_Coal.I_Coal_C", "count": 2},
                        ]
                    },
                    AMMO_BOX: {
                        "items": [
                            {"item": "/Game/Weapons/AmmoTypes/I_Bullet.I_Bullet_C", "count": 10},
                        ]
                    },
                },
                "knownRecipes": ["/Game/Recipes/CR_Torch.CR_Torch_C"],
            },
            "GameStateData": {
                "allCharactersBaseSaveData": {
                    "allPlayersSaveData": {
                        PLAYER_ID: {
                            "playerProgressionState": {
                                "skills": [
                                    {"skill": "Movement", "level": 2, "experience": 150.5},
                                    {"skill": "Combat", "level": 1, "experience": 20},
                                ]
                            },
                            "survivalData": {
                                "health": {"current": 80, "min": 0, "max": 100},
                                "energy": {"current": 55.5, "min": 0, "max": 60},
                            },
                        }
                    }
                }
            },
        },
        "meta": {"title": "Säve <1> & more", "flags": None},
    }


@pytest.fixture
def document():
    return make_document()


@pytest.fixture
def sav_path(tmp_path):
    """A .sav file on disk holding make_document()."""
    path = tmp_path / "slot1.sav"
    path.write_bytes(sav_codec.encode(make_document()))
    return str(path)
