import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..config import settings
from ..core.recovery import GraphQLResponseError, UnrecoverableError
from ..services.orders import (
    ActionType,
    CreateManualOrderInput,
    CreateManualOrderOutput,
    OpenOrderInput,
    Source,
    SwapInput,
)
from ..services.portfolio import Portfolio
from .graphql import GraphQLProvider

logger = logging.getLogger(__name__)


class SenpiUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_name: Optional[str] = Field(default=None, alias="userName")
    communication_preference: Optional[str] = Field(default=None, alias="communicationPreference")


CREATE_MANUAL_ORDER_MUTATION = """
mutation CreateManualOrder($createRuleInput: CreateManualOrderInput!) {
    CreateManualOrder(input: $createRuleInput) {
        success
        error
        metadata {
            traceId
            orderId
            ruleId
            ruleExecutionLogId
            swapOutput {
                txHash
                buyAmount
                sellAmount
                buyAmountInUSD
                sellAmountInUSD
                buyPrice
            }
            stopLossOutputs {
                subscriptionId
                stopLossPrice
                sellAmount
                triggerType
                triggerValue
            }
            limitOrderOutputs {
                limitOrderId
                limitPrice
                buyAmount
                buyAmountUSD
                sellAmount
                triggerType
                triggerValue
            }
        }
    }
}
"""

GET_PORTFOLIO_QUERY = """
query GetPortfolio($input: GetPortfolioInput!) {
    GetPortfolio(input: $input) {
        totalBalanceUSD
        tokenBalances {
            tokenAddress
            tokenSymbol
            tokenPriceInUSD
            formattedBalance
            balanceInWei
            balanceInUSD
            decimals
            tokenImgUrl
            tokenName
            chainId
        }
    }
}
"""

GET_USER_QUERY = """
query GetUser($userId: String!) {
    GetUser(input: { userId: $userId }) {
        id
        userName
        communicationPreference
    }
}
"""

TOP_GROUP_TARGETS_QUERY = """
query TopGroupTargets($orderBy: TopTargetsOrderBy, $skip: Int, $limit: Int, $timeframe: Timeframe!) {
    TopGroupTargets(input: { orderBy: $orderBy, skip: $skip, take: $limit, timeframe: $timeframe }) {
        targets {
            groupId
            groupName
            groupCreatedBy
            groupCreatedAt
            groupUpdatedAt
            groupStatus
            roi
            pnl
            winRate
            rank
            totalTrades
            groupMembersCount
            scamRate
        }
        pagination {
            totalCount
            skip
            take
        }
    }
}
"""

TOP_TRADERS_QUERY = """
query TopTraders($orderBy: TopTargetsOrderBy, $skip: Int, $limit: Int, $timeframe: Timeframe!) {
    TopTraders(input: { orderBy: $orderBy, skip: $skip, take: $limit, timeframe: $timeframe }) {
        traders {
            rank
            userId
            pnl
            roi
            winRate
            scamRate
            totalTrades
        }
        pagination {
            totalCount
            skip
            take
        }
    }
}
"""

USER_GROUP_STATS_QUERY = """
query GetUserGroupStatsOrRecommendations($input: GetUserGroupStatsOrRecommendationsInput!) {
    GetUserGroupStatsOrRecommendations(input: $input) {
        items {
            groupCreatorName
            groupCreatedBy
            groupId
            groupName
            initiatorUserId
            initiatorUserName
            winRate
            tradeCount
        }
        pagination {
            skip
            take
            totalCount
        }
    }
}
"""

TRENDING_TOKENS_QUERY = """
query GetTrendingTokens {
    GetTrendingTokens {
        address
        name
        symbol
        priceUSD
        marketCap
        liquidity
        volume24
        buyVolume24
        sellVolume24
        change1
        change4
        change12
        change24
        holders
        uniqueBuys24
        uniqueSells24
        walletAgeAvg
        createdAt
    }
}
"""

GET_GROUPS_QUERY = """
query GetGroups {
    GetGroups(input: {}) {
        groups {
            id
            name
        }
    }
}
"""

SEND_TRANSACTION_MUTATION = """
mutation SendTransaction($input: SendTransactionInput!) {
    SendTransaction(input: $input) {
        hash
    }
}
"""


class SenpiApiProvider(GraphQLProvider):
    """Client for the Senpi GraphQL API (orders, portfolio, users, discovery)"""

    name = "senpi_api"

    def __init__(
        self,
        api_url: Optional[str] = None,
        internal_url: Optional[str] = None,
        analysis_url: Optional[str] = None,
    ):
        self.api_url = api_url or settings.senpi_api_url
        self.internal_url = internal_url or settings.senpi_api_url_internal or self.api_url
        self.analysis_url = analysis_url or settings.api_url_for_analysis
        self.timeout_s = settings.request_timeout_seconds

    async def ready(self) -> bool:
        return bool(self.api_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "SENPI_API_URL not configured"}

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    json={"query": "{ __typename }"},
                    timeout=self.timeout_s,
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    @staticmethod
    def _auth(authorization: Optional[str]) -> Dict[str, str]:
        return {"Authorization": authorization} if authorization else {}

    async def create_manual_order(
        self,
        authorization: str,
        action_type: ActionType,
        source: Source,
        swap_input: Optional[SwapInput] = None,
        stop_loss_inputs: Optional[List[OpenOrderInput]] = None,
        limit_order_inputs: Optional[List[OpenOrderInput]] = None,
    ) -> CreateManualOrderOutput:
        """Place a swap and/or open orders in one rule execution."""
        if not swap_input and not stop_loss_inputs and not limit_order_inputs:
            raise ValueError("Please provide either stopLossInput or limitOrderInput or swapInput.")

        order_input = CreateManualOrderInput(
            action_type=action_type,
            source=source,
            swap_input=swap_input,
            stop_loss_input=stop_loss_inputs or None,
            limit_order_input=limit_order_inputs or None,
        )

        try:
            data = await self._execute(
                self.api_url,
                CREATE_MANUAL_ORDER_MUTATION,
                {"createRuleInput": order_input.to_payload()},
                headers=self._auth(authorization),
                operation="CreateManualOrder",
            )
        except GraphQLResponseError as e:
            raise GraphQLResponseError(
                f"Failed to create manual order: {e.message}",
                provider=self.name,
                operation="CreateManualOrder",
            ) from e

        return CreateManualOrderOutput.model_validate(data.get("CreateManualOrder") or {})

    async def get_portfolio(
        self,
        addresses: List[str],
        networks: List[int],
        token_addresses: Optional[List[str]] = None,
    ) -> Portfolio:
        query_input: Dict[str, Any] = {"addresses": addresses, "networks": networks}
        if token_addresses:
            query_input["tokenAddresses"] = token_addresses

        data = await self._execute(
            self.internal_url,
            GET_PORTFOLIO_QUERY,
            {"input": query_input},
            operation="GetPortfolio",
        )
        return Portfolio.from_api(data.get("GetPortfolio") or {})

    async def get_user(self, user_id: str) -> Optional[SenpiUser]:
        data = await self._execute(
            self.internal_url,
            GET_USER_QUERY,
            {"userId": user_id},
            operation="GetUser",
        )
        user = data.get("GetUser")
        if not user:
            return None
        return SenpiUser.model_validate({"id": user_id, **user})

    async def get_communication_preference(self, user_id: str) -> Optional[str]:
        try:
            user = await self.get_user(user_id)
        except Exception as e:
            logger.error(f"Error checking user preferences for {user_id}: {e}")
            return None
        return user.communication_preference if user else None

    async def get_top_group_targets(self, timeframe: str, limit: int = 25) -> Optional[List[Dict[str, Any]]]:
        try:
            data = await self._execute(
                self.internal_url,
                TOP_GROUP_TARGETS_QUERY,
                {"timeframe": timeframe, "limit": limit},
                operation="TopGroupTargets",
            )
        except Exception as e:
            logger.error(f"TopGroupTargets failed: {e}")
            return None
        return (data.get("TopGroupTargets") or {}).get("targets")

    async def get_top_traders(self, timeframe: str, limit: int = 25) -> Optional[List[Dict[str, Any]]]:
        try:
            data = await self._execute(
                self.internal_url,
                TOP_TRADERS_QUERY,
                {"timeframe": timeframe, "limit": limit, "orderBy": {"roi": "DESC"}},
                operation="TopTraders",
            )
        except Exception as e:
            logger.error(f"TopTraders failed: {e}")
            return None
        return (data.get("TopTraders") or {}).get("traders")

    async def get_user_group_stats_or_recommendations(
        self,
        query_input: Dict[str, Any],
        authorization: Optional[str],
    ) -> List[Dict[str, Any]]:
        data = await self._execute(
            self.analysis_url,
            USER_GROUP_STATS_QUERY,
            {"input": query_input},
            headers=self._auth(authorization),
            operation="GetUserGroupStatsOrRecommendations",
        )
        return (data.get("GetUserGroupStatsOrRecommendations") or {}).get("items") or []

    async def get_trending_tokens(self) -> List[Dict[str, Any]]:
        data = await self._execute(
            self.internal_url,
            TRENDING_TOKENS_QUERY,
            operation="GetTrendingTokens",
        )
        return data.get("GetTrendingTokens") or []

    async def get_group_names(self, authorization: Optional[str]) -> List[str]:
        data = await self._execute(
            self.api_url,
            GET_GROUPS_QUERY,
            headers=self._auth(authorization),
            operation="GetGroups",
        )
        groups = (data.get("GetGroups") or {}).get("groups") or []
        return [group["name"] for group in groups if group.get("name")]

    async def send_transaction(
        self,
        authorization: Optional[str],
        chain_id: str,
        transaction: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Submit a transaction through the user's delegated Senpi wallet."""
        data = await self._execute(
            self.api_url,
            SEND_TRANSACTION_MUTATION,
            {"input": {"chainId": chain_id, **transaction}},
            headers=self._auth(authorization),
            operation="SendTransaction",
        )
        result = data.get("SendTransaction") or {}
        if not result.get("hash"):
            raise UnrecoverableError("Transaction was not submitted")
        return result
