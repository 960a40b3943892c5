"""Embedded signal tables.

Known contract addresses, 4-byte method selectors and event topic hashes,
grouped by detector family. The structure mirrors the YAML overlay format
accepted by the registry loader:

    family:
      addresses: {address: label | {label, action}}
      selectors: {selector: action}
      topics:    {topic: action | {action, label}}

    chains:
      <chain id>:
        family:
          addresses: {...}

All keys are lower-case hex. The same hash may appear under several
families (e.g. ERC-20 and ERC-721 share the Transfer topic); each family
interprets it on its own.
"""

# Shared event signatures
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
APPROVAL_TOPIC = "0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"
TRANSFER_SINGLE_TOPIC = "0xc3d58168c5ae7397731d063d5bbf3d657854427343f4c083240f7aacaa2d0f62"
TRANSFER_BATCH_TOPIC = "0x4a39dc06d4c0dbc64b70af90fd698a233a518aa5d07e595d983b8c0526c8f7fb"

# DEX events
SWAP_V2_TOPIC = "0xd78ad95fa46c994b6551d0da85fc275fe613ce37657fb8d5e3d130840159d822"
SWAP_V3_TOPIC = "0xc42079f94a6350d7e6235f29174924f928cc2ac818eb64fed8004e115fbcca67"
SWAP_BALANCER_TOPIC = "0x2170c741c41531aec20e7c107c24eecfdd15e69c9bb0a8dd37b1840b9e0b207b"
TOKEN_EXCHANGE_CURVE_TOPIC = "0x8b3e96f2b889fa771c53c981b40daf005f63f637f1869f707052d15a3dd97140"
MINT_V2_TOPIC = "0x4c209b5fc8ad50758f13e2e1088ba56a560dff690a1c6fef26394f4c03821c4f"
MINT_V3_TOPIC = "0x7a53080ba414158be7ec69b987b5fb7d07dee101fe85488f0853ae16239d0bde"
BURN_V2_TOPIC = "0xdccd412f0b1252819cb1fd330b93224ca42612892bb3f4f789976e6d81936496"
BURN_V3_TOPIC = "0x0c396cd989a39f4459b5fa1aed6a9a8dcdbc45908acfd67e028cd568da98982c"
ADD_LIQUIDITY_CURVE_TOPIC = "0x26f55a85081d24974e85c6c00045d0f0453991e95873f52bff0d21af4079a768"

DEX_LABEL_V3 = "Uniswap V3 Compatible"
DEX_LABEL_V2 = "Uniswap V2 Compatible"
DEX_LABEL_BALANCER = "Balancer"
DEX_LABEL_CURVE = "Curve"


DEFAULT_SIGNALS: dict = {
    "dex": {
        "addresses": {
            "0x7a250d5630b4cf539739df2c5dacb4c659f2488d": "Uniswap V2",
            "0xe592427a0aece92de3edee1f18e0157c05861564": "Uniswap V3",
            "0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45": "Uniswap V3",
            "0x3fc91a3afd70395cd496c647d5a6cc9d4b2b7fad": "Uniswap Universal Router",
            "0xd9e1ce17f2641f24ae83637ab66a2cca9c378b9f": "SushiSwap",
            "0x10ed43c718714eb63d5aa57b78b54704e256024e": "PancakeSwap",
            "0x11111112542d85b3ef69ae05771c2dccff4faa26": "1inch V3",
            "0x1111111254fb6c44bac0bed2854e76f90643097d": "1inch V4",
            "0x1111111254eea2514d8f0f03ce855018a9947703": "1inch V5",
            "0xdef1c0ded9bec7f1a1670819833240f027b25eff": "0x Exchange",
            "0xba12222222228d8ba445958a75a0704d566bf2c8": "Balancer",
        },
        "selectors": {
            # Uniswap V2 style router
            "0x38ed1739": "swap",  # swapExactTokensForTokens
            "0x8803dbee": "swap",  # swapTokensForExactTokens
            "0x7ff36ab5": "swap",  # swapExactETHForTokens
            "0x4a25d94a": "swap",  # swapTokensForExactETH
            "0x18cbafe5": "swap",  # swapExactTokensForETH
            "0xfb3bdb41": "swap",  # swapETHForExactTokens
            # Uniswap V3 router
            "0x414bf389": "swap",  # exactInputSingle
            "0xdb3e2198": "swap",  # exactOutputSingle
            "0xc04b8d59": "swap",  # exactInput
            "0xf28c0498": "swap",  # exactOutput
            "0x09b81346": "swap",  # exactOutput (router02)
            # Liquidity management
            "0xe8e33700": "add_liquidity",  # addLiquidity
            "0xf305d719": "add_liquidity",  # addLiquidityETH
            "0xbaa2abde": "remove_liquidity",  # removeLiquidity
            "0x02751cec": "remove_liquidity",  # removeLiquidityETH
        },
        "topics": {
            SWAP_V2_TOPIC: {"action": "swap", "label": DEX_LABEL_V2},
            SWAP_V3_TOPIC: {"action": "swap", "label": DEX_LABEL_V3},
            SWAP_BALANCER_TOPIC: {"action": "swap", "label": DEX_LABEL_BALANCER},
            TOKEN_EXCHANGE_CURVE_TOPIC: {"action": "swap", "label": DEX_LABEL_CURVE},
            MINT_V2_TOPIC: "add_liquidity",
            MINT_V3_TOPIC: "add_liquidity",
            ADD_LIQUIDITY_CURVE_TOPIC: "add_liquidity",
            BURN_V2_TOPIC: "remove_liquidity",
            BURN_V3_TOPIC: "remove_liquidity",
        },
    },
    "nft": {
        "addresses": {
            "0x00000000000000adc04c56bf30ac9d3c0aaf14dc": "OpenSea Seaport",
            "0x00000000006c3852cbef3e08e8df289169ede581": "OpenSea Seaport",
            "0x59728544b08ab483533076417fbbb2fd0b17ce3a": "LooksRare",
            "0x000000000000ad05ccc4f10045630fb830b95127": "Blur",
            "0x74312363e45dcaba76c59ec49a7aa8a65a67eed3": "X2Y2",
        },
        "selectors": {
            "0xb3a34c4c": "fulfill",  # fulfillOrder
            "0xed98a574": "fulfill",  # fulfillAvailableOrders
            "0xfb0f3ee1": "fulfill",  # fulfillBasicOrder
            "0x42842e0e": "transfer",  # safeTransferFrom (ERC-721)
            "0xb88d4fde": "transfer",  # safeTransferFrom with data (ERC-721)
            "0xf242432a": "transfer",  # safeTransferFrom (ERC-1155)
            "0x2eb2c2d6": "transfer",  # safeBatchTransferFrom (ERC-1155)
        },
        "topics": {
            "0x9d9af8e38d66c62e2c12f0225249fd9d721c54b83f48d9352c97c6cacdcb6f31": {
                "action": "sale",
                "label": "OpenSea Seaport",
            },
            "0xc4109843e0b7d514e4c093114b863f8e7d8d9a458c372cd51bfe526b588006c9": {
                "action": "sale",
                "label": "OpenSea",
            },
            "0x61cbb2a3dee0b6064c2e681aadd61677fb4ef319f0b547508d495626f5a62f64": {
                "action": "sale",
                "label": "Blur",
            },
            "0x68cd251d4d267c6e2034ff0088b99c381c1369187d6b832b096a84aaefeb6546": {
                "action": "sale",
                "label": "LooksRare",
            },
            "0x3ee3de4684413690dee6fff1a0a4f934e643255547c92e75306e745f8cdea2d2": {
                "action": "sale",
                "label": "LooksRare",
            },
            TRANSFER_TOPIC: "transfer",  # ERC-721 only when 4 topics
            TRANSFER_SINGLE_TOPIC: "transfer_single",
            TRANSFER_BATCH_TOPIC: "transfer_batch",
        },
    },
    "bridge": {
        "addresses": {
            "0x99c9fc46f92e8a1c0dec1b1747d010903e884be1": "Optimism Bridge",
            "0x8315177ab297ba92a06054ce80a67ed4dbd7ed3a": "Arbitrum Bridge",
            "0x49048044d57e1c92a77f79988d21fa8faf74e97e": "Base Bridge",
            "0x3154cf16ccdb4c6d922629664174b904d80f2c35": "Base Bridge",
            "0xa0c68c638235ee32657e8f720a23cec1bfc77c77": "Polygon Bridge",
            "0x401f6c983ea34274ec46f84d70b31c151321188b": "Polygon Plasma Bridge",
            "0x72a53cdbbcc1b9efa39c834a540550e23463aacb": "Zora Bridge",
        },
        "selectors": {
            "0x9a2ac6d5": "deposit",  # bridgeETHTo
            "0x838b2520": "deposit",  # depositERC20To
            "0xe9e05c42": "deposit",  # depositTransaction
            "0x4870496f": "withdraw",  # proveWithdrawalTransaction
            "0x8c3152e9": "withdraw",  # finalizeWithdrawalTransaction
        },
        "topics": {
            "0x73d170910aba9e6d50b102db522b1dbcd796216f5128b445aa2135272886497e": "deposit",  # ETHBridgeInitiated
            "0x02a52367d10742d8032712c1bb8e0144ff1ec5ffda1ed7d70bb05a2744955054": "deposit",  # MessagePassed
            "0x35697241dfb2568469d80f845ac3253b22ab1e330a1c6827a4d57a3e7902d515": "deposit",  # DepositInitiated
            "0x1b2a7ff080b8cb6ff436ce0372e399692bbfb6d4ae5766fd8d58a7b8cc6142e6": "withdraw",  # ETHBridgeFinalized
            "0x4641df4a962071e12719d8c8c8e5ac7fc4d97b927346a3d7a335b1f7517e133c": "withdraw",  # RelayedMessage
            "0x5824c2dd8fe164f2e518d6e3264426d40026e6ba94d9302e3392d4f3b7b25e19": "withdraw",  # WithdrawalProven
        },
    },
    "lending": {
        "addresses": {
            "0x7d2768de32b0b80b7a3454c06bdac94a69ddc7a9": "Aave V2",
            "0x87870bca3f3fd6335c3f4ce8392d69350b4fa4e2": "Aave V3",
            "0x3d9819210a31b4961b30ef54be2aed79b9c9cd3b": "Compound",
            "0xc3d688b66703497daa19211eedff47f25384cdc3": "Compound V3",
        },
        "selectors": {
            "0xe8eda9df": "deposit",  # deposit (Aave V2)
            "0x617ba037": "deposit",  # supply (Aave V3)
            "0x69328dec": "withdraw",  # withdraw (Aave)
            "0xa415bcad": "borrow",  # borrow (Aave)
            "0x573ade81": "repay",  # repay (Aave)
            "0xa0712d68": "deposit",  # mint (Compound cToken)
            "0xdb006a75": "withdraw",  # redeem (Compound cToken)
            "0xc5ebeaec": "borrow",  # borrow (Compound cToken)
            "0x0e752702": "repay",  # repayBorrow (Compound cToken)
        },
        "topics": {
            "0xde6857219544bb5b7746f48ed30be6386fefc61b2f864cacf559893bf50fd951": {
                "action": "deposit",
                "label": "Aave Compatible",
            },
            "0x3115d1449a7b732c986cba18244e897a450f61e1bb8d589cd2e69e6c8924f9f7": {
                "action": "withdraw",
                "label": "Aave Compatible",
            },
            "0xc6a898309e823ee50bac64e45ca8adba6690e99e7841c45d754e2a38e9019d9b": {
                "action": "borrow",
                "label": "Aave Compatible",
            },
            "0x4cdde6e09bb755c9a5589ebaec640bbfedff1362d4b255ebf8339782b9942faa": {
                "action": "repay",
                "label": "Aave Compatible",
            },
            "0xe413a321e8681d831f4dbccbca790d2952b56f977908e45be37335533e005286": {
                "action": "liquidation",
                "label": "Aave Compatible",
            },
            # Compound Mint(address,uint256,uint256) collides with the
            # Uniswap V2 pair Mint, so it is left out.
            "0xe5b754fb1abb7f01b499791d0b820ae3b6af3424ac1c59768edb53f4ec31a929": {
                "action": "withdraw",
                "label": "Compound Compatible",
            },
            "0x13ed6866d4e1ee6da46f16c3d936f33f85f6b6189124208d58d43381285286a8": {
                "action": "borrow",
                "label": "Compound Compatible",
            },
            "0x1a2a22cb034d26d1854bdc6666a5b91fe25efbbb5dcad3b0355478d6f5c362a1": {
                "action": "repay",
                "label": "Compound Compatible",
            },
        },
    },
    "staking": {
        "addresses": {
            "0xae7ab96520de3a18e5e111b5eaab095312d7fe84": "Lido",
            "0xae78736cd615f374d3085123a210448e74fc6393": "Rocket Pool",
            "0x2cac916b2a963bf162f076c0a8a4a8200bcfbfb4": "Rocket Pool",
        },
        "selectors": {
            "0xa694fc3a": "stake",  # stake(uint256)
            "0xa1903eab": "stake",  # submit(address), Lido
            "0x2e1a7d4d": "unstake",  # withdraw(uint256)
            "0x3d18b912": "claim",  # getReward()
        },
        "topics": {
            "0x9e71bc8eea02a63969f509818f2dafb9254532904319f9dbda79b67bd34a5f3d": "stake",  # Staked
            "0x96a25c8ce0baabc1fdefd93e9ed25d8e092a3332f3aa9a41722b5697231d1d1a": "stake",  # Submitted, Lido
            "0x0f5bb82176feb1b5e747e28471aa92156a04d9f3ab9f45f28e2d704232b93f75": "unstake",  # Withdrawn
            "0x47cee97cb7acd717b3c0aa1435d004cd5b3c8c57d70dbceb4e4458bbd60e39d4": "claim",  # RewardsClaimed
        },
    },
    "governance": {
        "addresses": {
            "0xc0da02939e1441f497fd74f78ce7decb17b66529": "Compound Governor",
            "0x408ed6354d4973f66138c91495f2f2fcbd8724c3": "Uniswap Governor",
            "0x323a76393544d5ecca80cd6ef2a560c6a395b7e3": "ENS Governor",
        },
        "selectors": {
            "0x56781388": "vote",  # castVote
            "0x7b3c71d3": "vote",  # castVoteWithReason
            "0xda95691a": "propose",  # propose
            "0x5c19a95c": "delegate",  # delegate
            "0xfe0d94c1": "execute",  # execute(uint256)
        },
        "topics": {
            "0xb8e138887d0aa13bab447e82de9dcd1777061d0d18dcbc747a82b7db5761c56b": "vote",  # VoteCast
            "0x7d84a6263ae0d98d3329bd7b46bb4e8d6f98cd35a7adb45c274c8b7fd5ebd5e0": "propose",  # ProposalCreated
            "0x3134e8a2e6d97e929a7e54011ea5485d7d196dd5f0ba4d4ef95803e8e3fc257f": "delegate",  # DelegateChanged
            "0xdec2bacdd2f05b59de34da9b523dff8db32c408b72aa0a4171cd01d7445f8ef4": "delegate",  # DelegateVotesChanged
            "0x712ae1383f79ac853f8d882153778e0260ef8f03b50e394fe5fdb00bed72c93d": "execute",  # ProposalExecuted
        },
    },
    "execution": {
        "addresses": {
            "0x5ff137d4b0fdcd49dca30c7cf57e578a026d2789": {
                "label": "ERC-4337 EntryPoint v0.6",
                "action": "account_abstraction",
            },
            "0x0000000071727de22e5e9d8baf0edac6f37da032": {
                "label": "ERC-4337 EntryPoint v0.7",
                "action": "account_abstraction",
            },
        },
        "selectors": {
            "0x1fad948c": "account_abstraction",  # handleOps
            "0x4b1d7cf5": "account_abstraction",  # handleAggregatedOps
            "0x6a761202": "multisig",  # execTransaction (Safe)
        },
        "topics": {
            "0x49628fd147100edb3ef1d7634f6e33006d4e28293976af321d22cb2b05c751a3": "account_abstraction",  # UserOperationEvent
            "0x442e715f626346e8c54381002da614f62bee8cf2088c564363b46925e01e4756": "multisig",  # ExecutionSuccess
        },
    },
    "transfer": {
        "addresses": {},
        "selectors": {
            "0xa9059cbb": "transfer",  # transfer
            "0x23b872dd": "transfer",  # transferFrom
            "0x095ea7b3": "approve",  # approve
        },
        "topics": {
            TRANSFER_TOPIC: "transfer",
            APPROVAL_TOPIC: "approval",
        },
    },
    "chains": {
        # Base
        8453: {
            "dex": {
                "addresses": {
                    "0x2626664c2603336e57b271c5c0b26f421741e481": "Uniswap V3",
                    "0x4752ba5dbc23f44d87826276bf6fd6b1c372ad24": "Uniswap V2",
                    "0xcf77a3ba9a5ca399b7c97c74d54e5b1beb874e43": "Aerodrome",
                },
            },
            "bridge": {
                "addresses": {
                    "0x4200000000000000000000000000000000000010": "Base Bridge",
                    "0x4200000000000000000000000000000000000016": "Base Bridge",
                },
            },
        },
        # Optimism
        10: {
            "bridge": {
                "addresses": {
                    "0x4200000000000000000000000000000000000010": "Optimism Bridge",
                    "0x4200000000000000000000000000000000000016": "Optimism Bridge",
                },
            },
        },
    },
}

# Families every registry is expected to carry
FAMILIES: tuple[str, ...] = (
    "dex",
    "nft",
    "bridge",
    "lending",
    "staking",
    "governance",
    "execution",
    "transfer",
)
