"""Pokemon asset contract."""

from __future__ import annotations

from ledgerstore.constants import EVOLUTION_POWER_BONUS
from ledgerstore.contracts.base import Contract
from ledgerstore.errors import AlreadyInTargetStateError
from ledgerstore.records import Pokemon
from ledgerstore.store import HistoryEntry


class PokemonContract(Contract[Pokemon]):
    name = "pokemon"
    record_type = Pokemon

    def initial_records(self) -> list[Pokemon]:
        return [
            Pokemon(id="poke1", name="Pikachu", type="Electric", power=55,
                    trainer="Ash", location="Pallet Town"),
            Pokemon(id="poke2", name="Charmander", type="Fire", power=52,
                    trainer="Red", location="Cinnabar Island"),
            Pokemon(id="poke3", name="Squirtle", type="Water", power=48,
                    trainer="Misty", location="Cerulean City"),
        ]

    async def create_pokemon(
        self, id: str, name: str, type: str, trainer: str, location: str, power: int,
    ) -> Pokemon:
        pokemon = Pokemon(
            id=id, name=name, type=type, power=power,
            trainer=trainer, evolved=False, location=location,
        )
        await self.store.create(id, pokemon)
        return pokemon

    async def read_pokemon(self, id: str) -> Pokemon:
        return await self.store.read(id)

    async def update_pokemon(self, id: str, trainer: str, power: int) -> Pokemon:
        def _update(pokemon: Pokemon) -> None:
            pokemon.trainer = trainer
            pokemon.power = power

        return await self.store.update(id, _update)

    async def evolve_pokemon(self, id: str) -> Pokemon:
        """Mark as evolved and add the evolution power bonus."""

        def _evolve(pokemon: Pokemon) -> None:
            if pokemon.evolved:
                raise AlreadyInTargetStateError(f"Pokemon {id} is already evolved", key=id)
            pokemon.evolved = True
            pokemon.power += EVOLUTION_POWER_BONUS

        return await self.store.update(id, _evolve)

    async def delete_pokemon(self, id: str) -> str:
        return await self.store.delete(id)

    async def pokemon_exists(self, id: str) -> bool:
        return await self.store.exists(id)

    async def get_all_pokemon(self) -> list[Pokemon]:
        return await self.get_all()

    async def get_pokemon_history(self, id: str) -> list[HistoryEntry[Pokemon]]:
        return await self.get_history(id)
