"""
Static network table.

Single source of truth for chain identities, RPC endpoints, stablecoin
addresses and CCIP lanes. Loaded once at startup by
``NetworkRegistry.from_config``; nothing mutates it afterwards.

Lanes are keyed by the destination's canonical ChainKey. A lane listed on
one side says nothing about the reverse direction.
"""

from typing import Tuple

from .models import (
    CcipConfig,
    ChainFamily,
    ChainKey,
    Erc20Asset,
    NativeAsset,
    NetworkDescriptor,
    SplAsset,
)


ETHEREUM_SEPOLIA = ChainKey(ChainFamily.EVM, 11155111)
ARBITRUM_SEPOLIA = ChainKey(ChainFamily.EVM, 421614)
BASE_SEPOLIA = ChainKey(ChainFamily.EVM, 84532)
OP_SEPOLIA = ChainKey(ChainFamily.EVM, 11155420)
AVALANCHE_FUJI = ChainKey(ChainFamily.EVM, 43113)
POLYGON_AMOY = ChainKey(ChainFamily.EVM, 80002)
SOLANA_DEVNET = ChainKey(ChainFamily.SOLANA, "devnet")
HEDERA_TESTNET = ChainKey(ChainFamily.HEDERA, 296)
XRPL_TESTNET = ChainKey(ChainFamily.XRPL, "testnet")
TRON_SHASTA = ChainKey(ChainFamily.TRON, "shasta")
STARKNET_SEPOLIA = ChainKey(ChainFamily.STARKNET, "SN_SEPOLIA")

# Solana CCIP router program; used for every outbound Solana lane
SOLANA_CCIP_ROUTER = "Ccip842gzYHhvdDkSyi2YVCoAWPbYJoApMFzSxQroE9C"

ETH = NativeAsset(symbol="ETH", decimals=18)


NETWORKS: Tuple[NetworkDescriptor, ...] = (
    NetworkDescriptor(
        family=ChainFamily.EVM,
        chain_id=ETHEREUM_SEPOLIA.chain_id,
        name="Ethereum Sepolia",
        native_asset=ETH,
        rpc_endpoint="https://ethereum-sepolia-rpc.publicnode.com",
        explorer_base_url="https://sepolia.etherscan.io",
        stable_asset=Erc20Asset("USDC", "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238", 6),
        gas_price_wei=20_000_000_000,  # 20 gwei
        ccip=CcipConfig(
            chain_selector="16015286601757825753",
            router_address="0x0BF3dE8c5D3e8A2B34D2BEeB17ABfCeBaf363A59",
            lanes={
                AVALANCHE_FUJI: "0x12492154714fBD28F28219f6fc4315d19de1025B",
                ARBITRUM_SEPOLIA: "0xBc09627e58989Ba8F1eDA775e486467d2A00944F",
                BASE_SEPOLIA: "0x8F35B097022135E0F46831f798a240Cc8c4b0B01",
                OP_SEPOLIA: "0x54b32C2aCb4451c6cF66bcbd856d8A7Cc2263531",
                POLYGON_AMOY: "0x719Aef2C63376AdeCD62D2b59D54682aFBde914a",
                SOLANA_DEVNET: SOLANA_CCIP_ROUTER,
            },
        ),
    ),
    NetworkDescriptor(
        family=ChainFamily.EVM,
        chain_id=ARBITRUM_SEPOLIA.chain_id,
        name="Arbitrum Sepolia",
        native_asset=ETH,
        rpc_endpoint="https://api.zan.top/node/v1/arb/sepolia/public",
        explorer_base_url="https://sepolia-explorer.arbitrum.io",
        stable_asset=Erc20Asset("USDC", "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d", 6),
        gas_price_wei=100_000_000,  # 0.1 gwei
        ccip=CcipConfig(
            chain_selector="3478487238524512106",
            router_address="0x2a9C5afB0d0e4BAb2BCdaE109EC4b0c4Be15a165",
            # Avalanche Fuji lane omitted: its published onramp address is malformed
            lanes={
                BASE_SEPOLIA: "0xF162F1DBF87fb3efea1ec2b1FBA5c75A83f2F065",
                ETHEREUM_SEPOLIA: "0x64d7F7b8F0c90f91E2A5BB1D8a6eF98d8C663210",
                OP_SEPOLIA: "0x0B0c12F9B5b4C3D8Fb1FDf8a5B67a8F2da4eaC58",
                POLYGON_AMOY: "0x4127E7FDdB7Bc6F0Ae5b2FB6B5E3c82c7F5C1CD2",
            },
        ),
    ),
    NetworkDescriptor(
        family=ChainFamily.EVM,
        chain_id=BASE_SEPOLIA.chain_id,
        name="Base Sepolia",
        native_asset=ETH,
        rpc_endpoint="https://sepolia.base.org",
        explorer_base_url="https://sepolia.basescan.org",
        stable_asset=Erc20Asset("USDC", "0x036CbD53842c5426634e7929541eC2318f3dCF7e", 6),
        gas_price_wei=1_000_000_000,  # 1 gwei
        ccip=CcipConfig(
            chain_selector="10344971235874465080",
            router_address="0xD3b06cEbF099CE7DA4AcCf578aaebFDBd6e88a93",
            lanes={
                AVALANCHE_FUJI: "0x212e8Fd9cCC330ab54E8141FA7d33967eF1eDafF",
                ARBITRUM_SEPOLIA: "0xb52eF669d3fCeBee1f31418Facc02a16A6F6B0e5",
                OP_SEPOLIA: "0x2945D35F428CE564F5455AD0AF28BDFCa67e76Ab",
                ETHEREUM_SEPOLIA: "0x29A1F4ecE9246F0042A9062FB89803fA8B1830cB",
                POLYGON_AMOY: "0x82e28024D67F1e7BaF0b76FCf05e684f3aA11F96",
            },
        ),
    ),
    NetworkDescriptor(
        family=ChainFamily.EVM,
        chain_id=OP_SEPOLIA.chain_id,
        name="OP Sepolia",
        native_asset=ETH,
        rpc_endpoint="https://sepolia.optimism.io",
        explorer_base_url="https://sepolia-optimism.etherscan.io",
        stable_asset=Erc20Asset("USDC", "0x5fd84259d66Cd46123540766Be93DFE6D43130D7", 6),
        gas_price_wei=1_000_000_000,  # 1 gwei
        ccip=CcipConfig(
            chain_selector="5224473277236331295",
            router_address="0x114A20A10b43D4115e5aeef7345a1A71d2a60C57",
            lanes={
                AVALANCHE_FUJI: "0x91a144F570ABA7FB7079Fb187A267390E0cc7367",
                ARBITRUM_SEPOLIA: "0x6B36c9CD74E760088817a047C3460dEdFfe9a11A",
                BASE_SEPOLIA: "0x6D22953cdEf8B0C9F0976Cfa52c33B198fEc5881",
                ETHEREUM_SEPOLIA: "0x54b32C2aCb4451c6cF66bcbd856d8A7Cc2263531",
                POLYGON_AMOY: "0x9E09C2A7D6B9F88c62f0E2Af4cd62dF3F4c326F1",
                SOLANA_DEVNET: "0x8F5bED5F7601025b12A97b01584220C12e343986",
            },
        ),
    ),
    NetworkDescriptor(
        family=ChainFamily.EVM,
        chain_id=AVALANCHE_FUJI.chain_id,
        name="Avalanche Fuji",
        native_asset=NativeAsset(symbol="AVAX", decimals=18),
        rpc_endpoint="https://api.avax-test.network/ext/bc/C/rpc",
        explorer_base_url="https://testnet.snowtrace.io",
        stable_asset=Erc20Asset("USDC", "0x5425890298aed601595a70AB815c96711a31Bc65", 6),
        gas_price_wei=25_000_000_000,  # 25 gwei
        ccip=CcipConfig(
            chain_selector="14767482510784806043",
            router_address="0xF694E193200268f9a4868e4Aa017A0118C9a8177",
            lanes={
                ARBITRUM_SEPOLIA: "0xa9946BA30DAeC98745755e4410d6e8E894Edc53B",
                BASE_SEPOLIA: "0x0aEc1AC9F6D0c21332d7a66dDF1Fbcb32cF3B0B3",
                OP_SEPOLIA: "0x2a9EFdc9F93D9b822129038EFCa4B63Adf3f7FB5",
                ETHEREUM_SEPOLIA: "0x75b9a75Ee1fFef6BE7c4F842a041De7c6153CF4E",
                POLYGON_AMOY: "0xA82b9ACAcFA6FaB1FD721e7a748A30E3001351F9",
                SOLANA_DEVNET: "0xA5D5B0B844c8f11B61F28AC98BBA84dEA9b80953",
            },
        ),
    ),
    NetworkDescriptor(
        family=ChainFamily.EVM,
        chain_id=POLYGON_AMOY.chain_id,
        name="Polygon Amoy",
        native_asset=NativeAsset(symbol="POL", decimals=18),
        rpc_endpoint="https://rpc-amoy.polygon.technology/",
        explorer_base_url="https://amoy.polygonscan.com",
        stable_asset=Erc20Asset("USDC", "0x41E94Eb019C0762f9Bfcf9Fb1E58725BfB0e7582", 6),
        gas_price_wei=30_000_000_000,  # 30 gwei
        ccip=CcipConfig(
            chain_selector="16281711391670634445",
            router_address="0x9C32fCB86BF0f4a1A8921a9Fe46de3198bb884B2",
            lanes={
                AVALANCHE_FUJI: "0xad6A94CFB51e7DE30FD21F417E4cBf70D3AdaD30",
                ARBITRUM_SEPOLIA: "0x5b4942F603D039650AD0CfF8Bed0C49Fa6827Ed6",
                BASE_SEPOLIA: "0x82e28024D67F1e7BaF0b76FCf05e684f3aA11F96",
                OP_SEPOLIA: "0x600f00aef9b8ED8EDBd7284B5F04a1932c3408aF",
                ETHEREUM_SEPOLIA: "0x719Aef2C63376AdeCD62D2b59D54682aFBde914a",
                SOLANA_DEVNET: "0xF4EbCC2c077d3939434C7Ab0572660c5A45e4df5",
            },
        ),
    ),
    NetworkDescriptor(
        family=ChainFamily.SOLANA,
        chain_id=SOLANA_DEVNET.chain_id,
        name="Solana Devnet",
        native_asset=NativeAsset(symbol="SOL", decimals=9, uri_places=1),
        rpc_endpoint="https://api.devnet.solana.com",
        explorer_base_url="https://explorer.solana.com/?cluster=devnet",
        stable_asset=SplAsset("USDC", "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU", 6),
        ccip=CcipConfig(
            chain_selector="16423721717087811551",
            router_address=SOLANA_CCIP_ROUTER,
            lanes={
                AVALANCHE_FUJI: SOLANA_CCIP_ROUTER,
                ARBITRUM_SEPOLIA: SOLANA_CCIP_ROUTER,
                BASE_SEPOLIA: SOLANA_CCIP_ROUTER,
                OP_SEPOLIA: SOLANA_CCIP_ROUTER,
                ETHEREUM_SEPOLIA: SOLANA_CCIP_ROUTER,
                POLYGON_AMOY: SOLANA_CCIP_ROUTER,
            },
        ),
    ),
    NetworkDescriptor(
        family=ChainFamily.HEDERA,
        chain_id=HEDERA_TESTNET.chain_id,
        name="Hedera Testnet",
        # JSON-RPC relay precision (weibars), not the 8-decimal tinybar
        native_asset=NativeAsset(symbol="HBAR", decimals=18),
        rpc_endpoint="https://testnet.hashio.io/api",
        explorer_base_url="https://hashscan.io/testnet",
        bridgeable_assets=frozenset(),
    ),
    NetworkDescriptor(
        family=ChainFamily.XRPL,
        chain_id=XRPL_TESTNET.chain_id,
        name="XRP Ledger Testnet",
        native_asset=NativeAsset(symbol="XRP", decimals=6),
        rpc_endpoint="https://s.altnet.rippletest.net:51234",
        explorer_base_url="https://testnet.xrpl.org",
        bridgeable_assets=frozenset(),
    ),
    NetworkDescriptor(
        family=ChainFamily.TRON,
        chain_id=TRON_SHASTA.chain_id,
        name="Tron Shasta Testnet",
        native_asset=NativeAsset(symbol="TRX", decimals=6),
        rpc_endpoint="https://api.shasta.trongrid.io",
        explorer_base_url="https://shasta.tronscan.org",
        bridgeable_assets=frozenset(),
    ),
    NetworkDescriptor(
        family=ChainFamily.STARKNET,
        chain_id=STARKNET_SEPOLIA.chain_id,
        name="Starknet Sepolia",
        native_asset=ETH,
        rpc_endpoint="https://starknet-sepolia.public.blastapi.io",
        explorer_base_url="https://sepolia.starkscan.co",
        bridgeable_assets=frozenset(),
    ),
)

