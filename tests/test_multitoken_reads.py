from unittest.mock import AsyncMock, MagicMock

import pytest
from web3.exceptions import TransactionNotFound

from chains.currency import Currency
from common.errors import MultiTokenError, UnsupportedChainError

CONTRACT = "0x" + "a" * 40
OWNER = "0x" + "b" * 40


def _call(value=None, err=None):
    fn = MagicMock()
    fn.return_value.call = AsyncMock(return_value=value, side_effect=err)
    return fn


def _client_with_contract(**functions):
    w3 = MagicMock()
    contract = MagicMock()
    for name, fn in functions.items():
        setattr(contract.functions, name, fn)
    w3.eth.contract.return_value = contract
    return w3


@pytest.fixture
def patch_client(multitoken_service, monkeypatch):
    def _patch(w3):
        monkeypatch.setattr(multitoken_service, "_get_client", AsyncMock(return_value=w3))
        return w3

    return _patch


@pytest.mark.asyncio
async def test_metadata_returns_token_uri(multitoken_service, patch_client):
    token_uri = _call("ipfs://meta/1")
    w3 = patch_client(_client_with_contract(tokenURI=token_uri))

    res = await multitoken_service.get_metadata_multi_token(Currency.ETH, "1", CONTRACT)

    assert res == {"data": "ipfs://meta/1"}
    token_uri.assert_called_once_with(1)
    assert w3.eth.contract.call_args.kwargs["address"].lower() == CONTRACT


@pytest.mark.asyncio
async def test_metadata_failure_is_wrapped(multitoken_service, patch_client):
    patch_client(_client_with_contract(tokenURI=_call(err=ValueError("execution reverted"))))

    with pytest.raises(MultiTokenError) as e:
        await multitoken_service.get_metadata_multi_token(Currency.BSC, "1", CONTRACT)
    assert e.value.code == "nft.erc721.failed"
    assert "execution reverted" in e.value.message


@pytest.mark.asyncio
async def test_royalty_values_are_scaled_from_wei(multitoken_service, patch_client):
    patch_client(
        _client_with_contract(
            tokenCashbackRecipients=_call([OWNER, CONTRACT]),
            tokenCashbackValues=_call([500000000000000000, 2 * 10**18]),
        )
    )

    res = await multitoken_service.get_royalty_multi_token(Currency.CELO, "7", CONTRACT)

    assert res == {"addresses": [OWNER, CONTRACT], "values": ["0.5", "2"]}


@pytest.mark.asyncio
async def test_tokens_of_owner(multitoken_service, patch_client):
    tokens = _call([1, 5, 9])
    patch_client(_client_with_contract(tokensOfOwner=tokens))

    res = await multitoken_service.get_tokens_of_owner(Currency.ETH, OWNER, CONTRACT)

    assert res == {"data": ["1", "5", "9"]}
    assert tokens.call_args.args[0].lower() == OWNER


@pytest.mark.asyncio
async def test_reads_reject_non_evm_chain(multitoken_service):
    with pytest.raises(UnsupportedChainError):
        await multitoken_service.get_tokens_of_owner(Currency.ALGO, OWNER, CONTRACT)
    assert multitoken_service.node_calls == []


@pytest.mark.asyncio
async def test_transaction_merges_receipt(multitoken_service, patch_client):
    w3 = MagicMock()
    w3.eth.get_transaction = AsyncMock(
        return_value={"hash": "0x01", "r": "0x1", "s": "0x2", "v": 27, "from": OWNER, "nonce": 3}
    )
    w3.eth.get_transaction_receipt = AsyncMock(return_value={"transactionHash": "0x01", "status": 1, "gasUsed": 21000})
    patch_client(w3)

    res = await multitoken_service.get_transaction(Currency.ETH, "0x01")

    assert res == {"from": OWNER, "nonce": 3, "transactionHash": "0x01", "status": 1, "gasUsed": 21000}
    w3.eth.get_transaction_receipt.assert_awaited_once_with("0x01")


@pytest.mark.asyncio
async def test_transaction_without_receipt_keeps_explicit_hash(multitoken_service, patch_client):
    w3 = MagicMock()
    w3.eth.get_transaction = AsyncMock(return_value={"hash": "0x02", "r": "0x1", "s": "0x2", "v": 28, "nonce": 4})
    w3.eth.get_transaction_receipt = AsyncMock(side_effect=TransactionNotFound("pending"))
    patch_client(w3)

    res = await multitoken_service.get_transaction(Currency.BSC, "0x02")

    assert res == {"nonce": 4, "transactionHash": "0x02"}
    assert "status" not in res
    assert "r" not in res and "hash" not in res


@pytest.mark.asyncio
async def test_missing_transaction_is_tx_not_found(multitoken_service, patch_client):
    w3 = MagicMock()
    w3.eth.get_transaction = AsyncMock(side_effect=TransactionNotFound("nope"))
    patch_client(w3)

    with pytest.raises(MultiTokenError) as e:
        await multitoken_service.get_transaction(Currency.ETH, "0x03")
    assert e.value.code == "tx.not.found"
