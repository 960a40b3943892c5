"""Centralized constants for txclassifier.

This module contains enums and lookup tables shared by the detectors,
the engine and the formatters.
"""

from enum import Enum


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class TransactionType(str, Enum):
    """Coarse category assigned to a classified transaction."""

    SWAP = "swap"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"
    TRANSFER = "transfer"
    NATIVE_TRANSFER = "native_transfer"
    BULK_TRANSFER = "bulk_transfer"
    APPROVAL = "approval"
    MINT = "mint"
    BURN = "burn"
    BRIDGE = "bridge"  # outbound / deposit leg
    BRIDGE_WITHDRAW = "bridge_withdraw"  # inbound / withdrawal leg
    STAKE = "stake"
    UNSTAKE = "unstake"
    CLAIM_REWARDS = "claim_rewards"
    NFT_SALE = "nft_sale"
    NFT_TRANSFER = "nft_transfer"
    NFT_MINT = "nft_mint"
    LENDING_DEPOSIT = "lending_deposit"
    LENDING_WITHDRAW = "lending_withdraw"
    LENDING_BORROW = "lending_borrow"
    LENDING_REPAY = "lending_repay"
    LENDING_LIQUIDATION = "lending_liquidation"
    GOVERNANCE_VOTE = "governance_vote"
    GOVERNANCE_PROPOSE = "governance_propose"
    GOVERNANCE_DELEGATE = "governance_delegate"
    GOVERNANCE_EXECUTE = "governance_execute"
    ACCOUNT_ABSTRACTION = "account_abstraction"
    MULTISIG_EXECUTION = "multisig_execution"
    CONTRACT_DEPLOYMENT = "contract_deployment"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return TYPE_LABELS.get(self, "Unknown Transaction")

    @property
    def icon(self) -> str:
        return TYPE_ICONS.get(self, "❓")

    def __str__(self) -> str:
        return self.value


class TransactionEnvelope(str, Enum):
    """EIP-2718 envelope of a transaction."""

    LEGACY = "legacy"  # type 0x0
    EIP2930 = "eip2930"  # type 0x1, access lists
    EIP1559 = "eip1559"  # type 0x2, dynamic fees
    EIP4844 = "eip4844"  # type 0x3, blobs

    @classmethod
    def from_type_id(cls, value: int | None) -> "TransactionEnvelope":
        """Map the numeric envelope id, defaulting to LEGACY."""
        mapping = {
            0: cls.LEGACY,
            1: cls.EIP2930,
            2: cls.EIP1559,
            3: cls.EIP4844,
        }
        return mapping.get(value, cls.LEGACY)


TYPE_LABELS: dict[TransactionType, str] = {
    TransactionType.SWAP: "Token Swap",
    TransactionType.ADD_LIQUIDITY: "Add Liquidity",
    TransactionType.REMOVE_LIQUIDITY: "Remove Liquidity",
    TransactionType.TRANSFER: "Token Transfer",
    TransactionType.NATIVE_TRANSFER: "Native Transfer",
    TransactionType.BULK_TRANSFER: "Bulk Transfer",
    TransactionType.APPROVAL: "Token Approval",
    TransactionType.MINT: "Token Mint",
    TransactionType.BURN: "Token Burn",
    TransactionType.BRIDGE: "Bridge Deposit",
    TransactionType.BRIDGE_WITHDRAW: "Bridge Withdrawal",
    TransactionType.STAKE: "Stake",
    TransactionType.UNSTAKE: "Unstake",
    TransactionType.CLAIM_REWARDS: "Claim Rewards",
    TransactionType.NFT_SALE: "NFT Sale",
    TransactionType.NFT_TRANSFER: "NFT Transfer",
    TransactionType.NFT_MINT: "NFT Mint",
    TransactionType.LENDING_DEPOSIT: "Lending Deposit",
    TransactionType.LENDING_WITHDRAW: "Lending Withdrawal",
    TransactionType.LENDING_BORROW: "Borrow",
    TransactionType.LENDING_REPAY: "Repay Loan",
    TransactionType.LENDING_LIQUIDATION: "Liquidation",
    TransactionType.GOVERNANCE_VOTE: "Governance Vote",
    TransactionType.GOVERNANCE_PROPOSE: "Governance Proposal",
    TransactionType.GOVERNANCE_DELEGATE: "Vote Delegation",
    TransactionType.GOVERNANCE_EXECUTE: "Proposal Execution",
    TransactionType.ACCOUNT_ABSTRACTION: "Account Abstraction",
    TransactionType.MULTISIG_EXECUTION: "Multisig Execution",
    TransactionType.CONTRACT_DEPLOYMENT: "Contract Deployment",
    TransactionType.UNKNOWN: "Unknown Transaction",
}

TYPE_ICONS: dict[TransactionType, str] = {
    TransactionType.SWAP: "🔄",
    TransactionType.ADD_LIQUIDITY: "➕",
    TransactionType.REMOVE_LIQUIDITY: "➖",
    TransactionType.TRANSFER: "➡️",
    TransactionType.NATIVE_TRANSFER: "💸",
    TransactionType.BULK_TRANSFER: "📦",
    TransactionType.APPROVAL: "✅",
    TransactionType.MINT: "🪙",
    TransactionType.BURN: "🔥",
    TransactionType.BRIDGE: "🌉",
    TransactionType.BRIDGE_WITHDRAW: "🌉",
    TransactionType.STAKE: "🔒",
    TransactionType.UNSTAKE: "🔓",
    TransactionType.CLAIM_REWARDS: "🎁",
    TransactionType.NFT_SALE: "🖼️",
    TransactionType.NFT_TRANSFER: "🖼️",
    TransactionType.NFT_MINT: "🎨",
    TransactionType.LENDING_DEPOSIT: "🏦",
    TransactionType.LENDING_WITHDRAW: "🏦",
    TransactionType.LENDING_BORROW: "💳",
    TransactionType.LENDING_REPAY: "💳",
    TransactionType.LENDING_LIQUIDATION: "⚠️",
    TransactionType.GOVERNANCE_VOTE: "🗳️",
    TransactionType.GOVERNANCE_PROPOSE: "📜",
    TransactionType.GOVERNANCE_DELEGATE: "🤝",
    TransactionType.GOVERNANCE_EXECUTE: "⚙️",
    TransactionType.ACCOUNT_ABSTRACTION: "🧩",
    TransactionType.MULTISIG_EXECUTION: "🔐",
    TransactionType.CONTRACT_DEPLOYMENT: "🏗️",
    TransactionType.UNKNOWN: "❓",
}
